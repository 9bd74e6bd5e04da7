"""
Exceptions raised by the PFET calculators and books.
"""


class PFETError(Exception):
    """Base exception for the finance core."""
    pass


class TaxConfigError(PFETError, ValueError):
    """Tax bands or brackets are malformed (gaps, overlaps, unordered)."""
    pass


class InvalidInputError(PFETError, ValueError):
    """A value outside the documented domain reached a calculator."""
    pass


class DuplicateRecordError(PFETError):
    """A record with the same id is already held by the book."""
    pass


class DuplicateBudgetError(DuplicateRecordError):
    """A budget already exists for the category or id."""
    pass


class RecordNotFoundError(PFETError, KeyError):
    """Referenced loan, goal, payment or contribution is unknown."""
    pass
