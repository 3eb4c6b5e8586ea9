from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from .errors import UnsupportedConvention


def _key(name: str) -> str:
    return "".join(ch for ch in str(name).upper() if ch not in " /-_")


class _NamedConvention(str, Enum):
    """
    String enum whose members can be looked up by any of several spellings.

    Lookup ignores case, spaces, "/", "-" and "_", so "act/365f", "ACT365F"
    and "ACT/365-Fixed" all resolve to the same member.
    """

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return {}

    @classmethod
    def parse(cls, value: Union[str, "_NamedConvention"]):
        if isinstance(value, cls):
            return value
        if value is None:
            raise UnsupportedConvention(f"{cls.__name__} name is required")

        k = _key(value)
        for member in cls:
            if _key(member.value) == k:
                return member

        alias = cls._aliases().get(k)
        if alias is not None:
            return cls(alias)

        raise UnsupportedConvention(f"Unsupported {cls.__name__} convention: {value!r}")


class DayCount(_NamedConvention):
    ACT_365F = "ACT/365-Fixed"
    ACT_360 = "ACT/360"
    THIRTY_360_US = "30/360-US"

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return {
            "ACT365F": "ACT/365-Fixed",
            "ACT365": "ACT/365-Fixed",
            "30360": "30/360-US",
        }


class BusinessDayRoll(_NamedConvention):
    FOLLOWING = "FOLLOWING"
    PRECEDING = "PRECEDING"
    MODIFIED_FOLLOWING = "MODIFIED-FOLLOWING"

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return {"MODFOLLOW": "MODIFIED-FOLLOWING"}


class Compounding(_NamedConvention):
    ANNUAL = "ANNUAL"
    SEMI_ANNUAL = "SEMI-ANNUAL"
    # TODO: STREET prices as ANNUAL; a street-convention (semi-annual bond-equivalent) model is still undecided.
    STREET = "STREET"

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return {"SEMI": "SEMI-ANNUAL"}

    @property
    def frequency(self) -> int:
        return 2 if self is Compounding.SEMI_ANNUAL else 1
