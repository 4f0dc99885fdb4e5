"""Use cases for online payment checkout and reconciliation."""

from .initiate_payment import initiate_bkash_payment
from .reconcile_callback import CallbackOutcome, reconcile_bkash_callback

__all__ = ["CallbackOutcome", "initiate_bkash_payment", "reconcile_bkash_callback"]
