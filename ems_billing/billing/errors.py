"""Billing exceptions."""


class BillingError(Exception):
    """Base exception for billing errors."""

    pass


class BillingValidationError(BillingError):
    """Input failed validation (missing field, unknown code, bad value)."""

    pass


class CatalogLoadError(BillingValidationError):
    """A billing code row could not be loaded."""

    pass


class BillingNotFoundError(BillingError):
    """A lookup missed."""

    pass


class BillingCodeNotFoundError(BillingNotFoundError):
    """Billing code is not in the catalog."""

    def __init__(self, code: str):
        super().__init__(f"Unknown billing code: {code!r}")
        self.code = code


class RecordNotFoundError(BillingNotFoundError):
    """Appointment billing record does not exist."""

    def __init__(self, record_id: str):
        super().__init__(f"No appointment billing record with ID {record_id!r}")
        self.record_id = record_id


class DuplicateRecordError(BillingError):
    """A record with the same ID is already stored."""

    pass


class PersistenceError(BillingError):
    """Writing to the table provider failed."""

    pass


class ResponseParseError(BillingError):
    """A payer response line could not be parsed."""

    pass
