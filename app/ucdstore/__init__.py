"""ucdstore - Reconcile local Unicode Character Database mirrors."""

__version__ = "0.1.0"
