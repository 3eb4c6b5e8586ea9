from __future__ import annotations


class BondCalcError(ValueError):
    """Base class for validation failures raised by the valuation engine."""


class InvalidDate(BondCalcError):
    pass


class UnsupportedConvention(BondCalcError):
    pass


class ScheduleTooLong(BondCalcError):
    pass


class InvalidTargetPrice(BondCalcError):
    pass


class InvalidYield(BondCalcError):
    pass


class EmptyCashflowSet(BondCalcError):
    pass
