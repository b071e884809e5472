"""Canonical cell record model.

The canonical record is the single shape every technology-specific
measurement is normalized into.  Which raw signal fields a record may
populate is fixed by its technology; see :data:`TECHNOLOGY_SIGNAL_FIELDS`.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator, model_validator

from netsense.models._base import CellBaseModel, CellEnum

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------

_TECHNOLOGY_ALIASES: dict[str, str] = {
    "4g": "LTE",
    "5g": "NR",
    "5gnr": "NR",
    "tdscdma": "TDSCDMA",
    "umts": "WCDMA",
    "3g": "WCDMA",
    "2g": "GSM",
}

_DISPLAY_NAMES: dict[str, str] = {
    "LTE": "LTE",
    "NR": "5G NR",
    "CDMA": "CDMA",
    "GSM": "GSM",
    "WCDMA": "WCDMA",
    "TDSCDMA": "TDS-CDMA",
    "Unknown": "Unknown",
}


class RadioTechnology(CellEnum):
    """Radio access technology of a cell."""

    LTE = "LTE"
    NR = "NR"
    CDMA = "CDMA"
    GSM = "GSM"
    WCDMA = "WCDMA"
    TDSCDMA = "TDSCDMA"
    UNKNOWN = "Unknown"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return _TECHNOLOGY_ALIASES

    @property
    def display_name(self) -> str:
        """Human-readable label used in exports (``"5G NR"``, ``"TDS-CDMA"``)."""
        return _DISPLAY_NAMES[self.value]


_ROLE_ALIASES: dict[str, str] = {
    "primary": "Serving",
    "primaryconnection": "Serving",
    "registered": "Serving",
    "connected": "Serving",
    "secondaryconnection": "Secondary",
    "none": "Neighboring",
    "noneconnection": "Neighboring",
    "neighbor": "Neighboring",
    "neighbour": "Neighboring",
    "neighbouring": "Neighboring",
}


class ConnectionRole(CellEnum):
    """Role of a cell in the device's current connection."""

    SERVING = "Serving"
    SECONDARY = "Secondary"
    NEIGHBORING = "Neighboring"
    UNKNOWN = "Unknown"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return _ROLE_ALIASES


# Raw signal fields each technology may populate on a canonical record.
_LEGACY_FIELDS = frozenset({"rssi"})
TECHNOLOGY_SIGNAL_FIELDS: dict[RadioTechnology, frozenset[str]] = {
    RadioTechnology.LTE: frozenset({"rsrp", "rsrq", "sinr", "rssi"}),
    RadioTechnology.NR: frozenset({"ss_rsrp", "ss_rsrq", "ss_sinr", "csi_rsrp", "csi_rsrq", "csi_sinr"}),
    RadioTechnology.CDMA: frozenset({"rssi", "sinr"}),
    RadioTechnology.GSM: _LEGACY_FIELDS,
    RadioTechnology.WCDMA: _LEGACY_FIELDS,
    RadioTechnology.TDSCDMA: _LEGACY_FIELDS,
    RadioTechnology.UNKNOWN: frozenset(),
}

SIGNAL_FIELDS: tuple[str, ...] = (
    "rsrp",
    "rsrq",
    "sinr",
    "rssi",
    "ss_rsrp",
    "ss_rsrq",
    "ss_sinr",
    "csi_rsrp",
    "csi_rsrq",
    "csi_sinr",
)

IDENTITY_FIELDS: tuple[str, ...] = (
    "mcc",
    "mnc",
    "iso_country",
    "eci",
    "enb",
    "cid",
    "tac",
    "pci",
    "frequency_label",
    "bandwidth_label",
)


class CanonicalCellRecord(CellBaseModel):
    """One normalized cell measurement.

    Records are immutable.  Signal values are in dBm/dB and are ``None``
    when the provider did not report them or when they do not apply to
    the record's technology.  Consolidated metrics are strings and are
    ``""`` when no contributing field is available.
    """

    _STRIP_SENTINELS: ClassVar[bool] = False

    technology: RadioTechnology = RadioTechnology.UNKNOWN
    role: ConnectionRole = ConnectionRole.UNKNOWN
    acquired_at: str = ""
    """Provider timestamp; only used as a grouping key."""

    # --- Identity ---
    mcc: str | None = None
    mnc: str | None = None
    iso_country: str | None = None
    eci: str | None = None
    enb: str | None = None
    cid: str | None = None
    tac: str | None = None
    pci: str | None = None
    frequency_label: str | None = None
    bandwidth_label: str | None = None

    # --- LTE / legacy signal ---
    rsrp: float | None = None
    rsrq: float | None = None
    sinr: float | None = None
    rssi: float | None = None

    # --- NR signal ---
    ss_rsrp: float | None = None
    ss_rsrq: float | None = None
    ss_sinr: float | None = None
    csi_rsrp: float | None = None
    csi_rsrq: float | None = None
    csi_sinr: float | None = None

    # --- Derived ---
    signal_bucket: int = Field(default=0, ge=0, le=4)
    consolidated_rsrp: str = ""
    consolidated_rsrq: str = ""
    consolidated_sinr: str = ""

    @field_validator("acquired_at", mode="before")
    @classmethod
    def _coerce_acquired_at(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @model_validator(mode="after")
    def _check_technology_fields(self) -> CanonicalCellRecord:
        allowed = TECHNOLOGY_SIGNAL_FIELDS[self.technology]
        stray = [name for name in SIGNAL_FIELDS if name not in allowed and getattr(self, name) is not None]
        if stray:
            raise ValueError(f"{self.technology.value} record cannot carry {', '.join(stray)}")
        if self.technology is RadioTechnology.UNKNOWN:
            populated = [name for name in IDENTITY_FIELDS if getattr(self, name) is not None]
            if populated:
                raise ValueError(f"Unknown-technology record cannot carry {', '.join(populated)}")
        return self

    @property
    def is_serving(self) -> bool:
        return self.role is ConnectionRole.SERVING


class SimpleFallbackRecord(CellBaseModel):
    """Reduced measurement shape produced by the native fallback provider.

    Fallback records are display-only: they are never promoted to
    :class:`CanonicalCellRecord`, cached, or exported.
    """

    technology: RadioTechnology = RadioTechnology.UNKNOWN
    is_serving: bool = False
    rsrp: int | None = None
    rsrq: int | None = None
    rssi: int | None = None
    sinr: int | None = None
    pci: int | None = None
    cell_id: str | None = None

    @field_validator("cell_id", mode="before")
    @classmethod
    def _coerce_cell_id(cls, value: Any) -> str | None:
        return None if value is None else str(value)
