"""Technology-tagged raw measurement models.

Providers report cells in a nested shape: common identity (``network``,
``band``, ``connectionStatus``, ``timestamp``) plus a technology-specific
``signal`` block and identifiers.  Each radio technology has its own
model; :data:`RawMeasurement` is the discriminated union over them,
keyed on the ``technology`` tag.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import (
    AliasChoices,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
    model_validator,
)

from netsense.models._base import CellBaseModel
from netsense.models.cell import ConnectionRole, RadioTechnology

#: Payload keys accepted for a measurement's connection role, in priority order.
CONNECTION_STATUS_KEYS: tuple[str, ...] = ("connectionStatus", "connection_status", "connection", "role")


# ------------------------------------------------------------------
# Shared building blocks
# ------------------------------------------------------------------


class NetworkInfo(CellBaseModel):
    """PLMN of the cell."""

    mcc: str | None = None
    mnc: str | None = None
    iso: str | None = None

    @field_validator("mcc", "mnc", "iso", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class BandInfo(CellBaseModel):
    """Carrier/band description.  Which channel field is set depends on the RAT."""

    name: str | None = None
    number: int | None = None
    channel_number: int | None = None
    downlink_earfcn: int | None = None
    downlink_arfcn: int | None = None
    downlink_frequency: int | None = None


class RawCellBase(CellBaseModel):
    """Fields common to every technology-specific raw measurement."""

    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.UNKNOWN

    technology: RadioTechnology
    connection_status: ConnectionRole = Field(
        default=ConnectionRole.UNKNOWN,
        validation_alias=AliasChoices(*CONNECTION_STATUS_KEYS),
    )
    timestamp: str | None = None
    network: NetworkInfo | None = None
    band: BandInfo | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
    """Original provider payload."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if isinstance(values, dict) and "raw" not in values:
            return {**values, "raw": dict(values)}
        return values

    @field_validator("technology")
    @classmethod
    def _check_tag(cls, value: RadioTechnology) -> RadioTechnology:
        if value is not cls.TECHNOLOGY:
            raise ValueError(f"{cls.__name__} cannot hold a {value.value} measurement")
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value


# ------------------------------------------------------------------
# Signals
# ------------------------------------------------------------------


class SignalLte(CellBaseModel):
    rsrp: float | None = None
    rsrq: float | None = None
    rssi: float | None = None
    snr: float | None = None
    cqi: int | None = None
    timing_advance: int | None = None


class SignalNr(CellBaseModel):
    ss_rsrp: float | None = None
    ss_rsrq: float | None = None
    ss_sinr: float | None = None
    csi_rsrp: float | None = None
    csi_rsrq: float | None = None
    csi_sinr: float | None = None


class SignalCdma(CellBaseModel):
    cdma_rssi: float | None = None
    cdma_ecio: float | None = None
    evdo_rssi: float | None = None
    evdo_ecio: float | None = None
    evdo_snr: float | None = None


class SignalGsm(CellBaseModel):
    rssi: float | None = None
    bit_error_rate: int | None = None
    timing_advance: int | None = None


class SignalWcdma(CellBaseModel):
    rssi: float | None = None
    rscp: float | None = None
    ecno: float | None = None
    ecio: float | None = None
    bit_error_rate: int | None = None


class SignalTdscdma(CellBaseModel):
    rssi: float | None = None
    rscp: float | None = None


# ------------------------------------------------------------------
# Per-technology measurements
# ------------------------------------------------------------------


class RawLteCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.LTE

    technology: RadioTechnology = RadioTechnology.LTE
    eci: int | None = None
    enb: int | None = None
    cid: int | None = None
    tac: int | None = None
    pci: int | None = None
    bandwidth: int | None = None
    """Channel bandwidth in kHz as reported by the provider."""
    signal: SignalLte = Field(default_factory=SignalLte)


class RawNrCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.NR

    technology: RadioTechnology = RadioTechnology.NR
    nci: int | None = None
    tac: int | None = None
    pci: int | None = None
    signal: SignalNr = Field(default_factory=SignalNr)


class RawCdmaCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.CDMA

    technology: RadioTechnology = RadioTechnology.CDMA
    sid: int | None = None
    nid: int | None = None
    bid: int | None = None
    signal: SignalCdma = Field(default_factory=SignalCdma)


class RawGsmCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.GSM

    technology: RadioTechnology = RadioTechnology.GSM
    cid: int | None = None
    lac: int | None = None
    bsic: int | None = None
    signal: SignalGsm = Field(default_factory=SignalGsm)


class RawWcdmaCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.WCDMA

    technology: RadioTechnology = RadioTechnology.WCDMA
    ci: int | None = None
    lac: int | None = None
    psc: int | None = None
    signal: SignalWcdma = Field(default_factory=SignalWcdma)


class RawTdscdmaCell(RawCellBase):
    TECHNOLOGY: ClassVar[RadioTechnology] = RadioTechnology.TDSCDMA

    technology: RadioTechnology = RadioTechnology.TDSCDMA
    ci: int | None = None
    lac: int | None = None
    cpid: int | None = None
    signal: SignalTdscdma = Field(default_factory=SignalTdscdma)


RAW_MODELS: dict[RadioTechnology, type[RawCellBase]] = {
    RadioTechnology.LTE: RawLteCell,
    RadioTechnology.NR: RawNrCell,
    RadioTechnology.CDMA: RawCdmaCell,
    RadioTechnology.GSM: RawGsmCell,
    RadioTechnology.WCDMA: RawWcdmaCell,
    RadioTechnology.TDSCDMA: RawTdscdmaCell,
}


def technology_tag(value: Any) -> str:
    """Return the canonical technology tag of a raw payload or model."""
    if isinstance(value, RawCellBase):
        return value.technology.value
    if isinstance(value, dict):
        return RadioTechnology(value.get("technology") or "").value
    return RadioTechnology.UNKNOWN.value


RawMeasurement = Annotated[
    Annotated[RawLteCell, Tag(RadioTechnology.LTE.value)]
    | Annotated[RawNrCell, Tag(RadioTechnology.NR.value)]
    | Annotated[RawCdmaCell, Tag(RadioTechnology.CDMA.value)]
    | Annotated[RawGsmCell, Tag(RadioTechnology.GSM.value)]
    | Annotated[RawWcdmaCell, Tag(RadioTechnology.WCDMA.value)]
    | Annotated[RawTdscdmaCell, Tag(RadioTechnology.TDSCDMA.value)],
    Discriminator(technology_tag),
]
"""Any technology-specific raw measurement, discriminated by ``technology``."""

_RAW_ADAPTER: TypeAdapter[RawCellBase] = TypeAdapter(RawMeasurement)


def parse_raw_measurement(payload: dict[str, Any]) -> RawCellBase:
    """Validate a provider payload into its technology-specific model.

    Raises :class:`pydantic.ValidationError` when the tag is unrecognized
    or the payload does not fit the tagged shape.
    """
    return _RAW_ADAPTER.validate_python(payload)
