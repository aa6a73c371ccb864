"""Error types raised by the service layer.

Each error also derives from the builtin the routes already translate
(ValueError -> 400, LookupError -> 404, ConnectionError -> 503), so callers
that only know the builtins keep working.
"""


class FinanceError(Exception):
    """Base class for every service-level failure."""


class InvalidPeriod(FinanceError, ValueError):
    """A month, date or year string did not match its strict format."""


class NotFound(FinanceError, LookupError):
    """The requested month record (budget, income, entries) does not exist."""


class SourcesExceedTotal(FinanceError, ValueError):
    """Declared income sources add up to more than the declared total."""


class OverAllocated(FinanceError, ValueError):
    """Budget categories add up to more than the budget total."""


class UnsupportedIntent(FinanceError, ValueError):
    """The chat layer received an intent it has no operation for."""


class CollaboratorFailure(FinanceError, ConnectionError):
    """The database, OCR service or LLM was unreachable or returned garbage."""
