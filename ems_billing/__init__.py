"""EMS Billing: encounter billing and payer reconciliation for the clinic."""

__version__ = "0.1.0"
