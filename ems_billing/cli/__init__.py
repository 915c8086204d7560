"""CLI for EMS Billing."""

from ems_billing.cli.commands import app

__all__ = ["app"]
