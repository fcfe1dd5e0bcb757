"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so batch callers and the CLI layer can catch them uniformly.  Anything that
is *not* a DomainException (a lost database connection, say) is an
infrastructure failure and propagates untouched.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """A reservation would drive available stock below zero."""


class UnresolvedReferenceError(DomainException):
    """A line's product or package cannot be resolved to a stocked item."""


class MissingWarehouseError(DomainException):
    """No warehouse could be resolved for a line."""


class LedgerIntegrityError(DomainException):
    """Stock levels disagree with the movement ledger.

    Carries the individual findings so operators can act on them.
    """

    def __init__(self, issues: list) -> None:
        self.issues = list(issues)
        summary = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"Ledger integrity check failed: {summary}")
