"""Custom exception classes for billing runs.

Every failure carries the period and, where it applies, the member id so the
caller can tell which invoice could not be built.
"""


class BillingError(Exception):
    """Base exception for billing errors."""

    def __init__(self, message: str, *, period=None, member_id: int | None = None):
        self.period = period
        self.member_id = member_id
        context = []
        if period is not None:
            context.append(f"period={period}")
        if member_id is not None:
            context.append(f"member={member_id}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class InvalidPeriodError(BillingError, ValueError):
    """Period identifier is malformed or its number is outside 1..6."""

    pass


class LookupFailureError(BillingError, LookupError):
    """A required record is missing or the store could not be read."""

    pass


class DivisionPreconditionError(BillingError):
    """The derrama cannot be split: there are no active members."""

    pass


class NegativeConsumptionError(BillingError, ValueError):
    """Current reading is lower than the previous one."""

    pass


__all__ = [
    "BillingError",
    "DivisionPreconditionError",
    "InvalidPeriodError",
    "LookupFailureError",
    "NegativeConsumptionError",
]
