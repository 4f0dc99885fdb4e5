"""Realtime messaging and payment reconciliation core for the marketplace."""
