"""Base model and enum for cell measurement payloads.

Every netsense model inherits from :class:`CellBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase provider keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips provider sentinel
  values (``""``, ``"--"``, ``"N/A"``, NaN, Android ``UNAVAILABLE``)
  so the field default is used.

Enumerations inherit from :class:`CellEnum` which resolves known
aliases case-insensitively and maps anything else to ``UNKNOWN``
instead of raising ``ValueError``.
"""

from __future__ import annotations

import enum
import math
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from netsense._constants import UNAVAILABLE_INT, UNAVAILABLE_LONG

# Sentinel strings providers use for "not available".
_SENTINELS = frozenset({"", "--", "N/A", "n/a", "NaN", "nan"})
_UNAVAILABLE_NUMBERS = frozenset({UNAVAILABLE_INT, UNAVAILABLE_LONG})


def is_sentinel(value: Any) -> bool:
    """Return ``True`` when *value* is a provider "not available" marker."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value.strip() in _SENTINELS
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, int) and value in _UNAVAILABLE_NUMBERS:
        return True
    return False


def _alias_key(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


class CellEnum(enum.StrEnum):
    """Base for netsense enums.

    Every subclass **must** define an ``UNKNOWN`` member.  Subclasses may
    override :meth:`_aliases` to map normalized spellings (lowercase,
    letters and digits only) to member values.
    """

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def _missing_(cls, value: object) -> CellEnum:
        if isinstance(value, str):
            key = _alias_key(value)
            target = cls._aliases().get(key)
            if target is not None:
                return cls(target)
            for member in cls:
                if _alias_key(member.value) == key:
                    return member
        # noinspection PyUnresolvedReferences
        unknown: CellEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown

    @classmethod
    def is_known(cls, value: object) -> bool:
        """Return ``True`` when *value* resolves to a member other than ``UNKNOWN``."""
        member = cls(value)
        return member is not cls.UNKNOWN or _alias_key(str(value)) == "unknown"  # type: ignore[attr-defined]


class CellBaseModel(BaseModel):
    """Base for netsense models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * provider sentinel values → dropped so the field default is used
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    _STRIP_SENTINELS: ClassVar[bool] = True
    """Set to ``False`` on models built from already-normalized values."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Strip sentinel values and apply key aliases on *values*."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        return {key: value for key, value in working.items() if not is_sentinel(value)}

    @model_validator(mode="before")
    @classmethod
    def _clean_provider_values(cls, values: Any) -> Any:
        """Strip sentinel values and apply key aliases."""
        if not isinstance(values, dict) or not getattr(cls, "_STRIP_SENTINELS", True):
            return values
        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        return CellBaseModel._clean_dict(values, aliases)
