"""Per-technology normalization of raw measurements.

Each radio technology has one mapping function from its raw model to
canonical record fields.  :func:`normalize` dispatches on the tag the
caller supplies; a tag that is unrecognized or does not match the raw
shape produces an ``Unknown`` record instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from netsense.exceptions import MalformedRecordError
from netsense.ingestion.normalize import (
    band_label,
    consolidated_rsrp,
    consolidated_rsrq,
    consolidated_sinr,
    estimate_nr_bandwidth,
    legacy_signal_bucket,
    lte_nr_signal_bucket,
    safe_str,
)
from netsense.models.cell import CanonicalCellRecord, ConnectionRole, RadioTechnology
from netsense.models.raw import (
    CONNECTION_STATUS_KEYS,
    RAW_MODELS,
    RawCdmaCell,
    RawCellBase,
    RawGsmCell,
    RawLteCell,
    RawNrCell,
    RawTdscdmaCell,
    RawWcdmaCell,
)

_logger = logging.getLogger(__name__)

Fields = dict[str, Any]


def _network_fields(cell: RawCellBase) -> Fields:
    network = cell.network
    if network is None:
        return {}
    return {"mcc": network.mcc, "mnc": network.mnc, "iso_country": network.iso}


def _normalize_lte(cell: RawLteCell) -> Fields:
    band = cell.band
    earfcn = None
    if band is not None:
        earfcn = band.downlink_earfcn if band.downlink_earfcn is not None else band.channel_number
    return {
        "eci": safe_str(cell.eci),
        "enb": safe_str(cell.enb),
        "cid": safe_str(cell.cid),
        "tac": safe_str(cell.tac),
        "pci": safe_str(cell.pci),
        "frequency_label": safe_str(earfcn),
        "bandwidth_label": safe_str(cell.bandwidth),
        "rsrp": cell.signal.rsrp,
        "rsrq": cell.signal.rsrq,
        "sinr": cell.signal.snr,
        "rssi": cell.signal.rssi,
    }


def _normalize_nr(cell: RawNrCell) -> Fields:
    band = cell.band
    arfcn = band.downlink_arfcn if band is not None else None
    frequency = None
    if band is not None:
        frequency = band.downlink_frequency if band.downlink_frequency is not None else band.downlink_arfcn
    signal = cell.signal
    return {
        "tac": safe_str(cell.tac),
        "pci": safe_str(cell.pci),
        "frequency_label": safe_str(frequency),
        "bandwidth_label": estimate_nr_bandwidth(arfcn),
        "ss_rsrp": signal.ss_rsrp,
        "ss_rsrq": signal.ss_rsrq,
        "ss_sinr": signal.ss_sinr,
        "csi_rsrp": signal.csi_rsrp,
        "csi_rsrq": signal.csi_rsrq,
        "csi_sinr": signal.csi_sinr,
    }


def _normalize_cdma(cell: RawCdmaCell) -> Fields:
    channel = cell.band.channel_number if cell.band is not None else None
    return {
        "frequency_label": safe_str(channel),
        "rssi": cell.signal.cdma_rssi,
        "sinr": cell.signal.evdo_snr,
    }


def _legacy_band(cell: RawCellBase, channel_kind: str) -> str | None:
    band = cell.band
    if band is None:
        return None
    return band_label(band.name, band.number, band.channel_number, channel_kind)


def _normalize_gsm(cell: RawGsmCell) -> Fields:
    return {
        "cid": safe_str(cell.cid),
        "tac": safe_str(cell.lac),
        "frequency_label": _legacy_band(cell, "ARFCN"),
        "rssi": cell.signal.rssi,
    }


def _normalize_wcdma(cell: RawWcdmaCell) -> Fields:
    signal = cell.signal
    return {
        "pci": safe_str(cell.psc),
        "frequency_label": _legacy_band(cell, "UARFCN"),
        "rssi": signal.rssi if signal.rssi is not None else signal.rscp,
    }


def _normalize_tdscdma(cell: RawTdscdmaCell) -> Fields:
    signal = cell.signal
    return {
        "pci": safe_str(cell.cpid),
        "frequency_label": _legacy_band(cell, "UARFCN"),
        "rssi": signal.rssi if signal.rssi is not None else signal.rscp,
    }


_NORMALIZERS: dict[RadioTechnology, Callable[[Any], Fields]] = {
    RadioTechnology.LTE: _normalize_lte,
    RadioTechnology.NR: _normalize_nr,
    RadioTechnology.CDMA: _normalize_cdma,
    RadioTechnology.GSM: _normalize_gsm,
    RadioTechnology.WCDMA: _normalize_wcdma,
    RadioTechnology.TDSCDMA: _normalize_tdscdma,
}


def signal_bucket(technology: RadioTechnology, fields: Mapping[str, Any]) -> int:
    """Bucket the technology's primary power metric on its threshold ladder."""
    if technology is RadioTechnology.LTE:
        return lte_nr_signal_bucket(fields.get("rsrp"))
    if technology is RadioTechnology.NR:
        return lte_nr_signal_bucket(fields.get("ss_rsrp"))
    if technology is RadioTechnology.UNKNOWN:
        return 0
    return legacy_signal_bucket(fields.get("rssi"))


def _role_of(raw: Any) -> ConnectionRole:
    if isinstance(raw, RawCellBase):
        return raw.connection_status
    if isinstance(raw, Mapping):
        for key in CONNECTION_STATUS_KEYS:
            value = raw.get(key)
            if isinstance(value, str) and value:
                return ConnectionRole(value)
    return ConnectionRole.UNKNOWN


def _timestamp_of(raw: Any) -> str:
    if isinstance(raw, RawCellBase):
        return raw.timestamp or ""
    if isinstance(raw, Mapping):
        return safe_str(raw.get("timestamp")) or ""
    return ""


def unknown_record(role: ConnectionRole = ConnectionRole.UNKNOWN, acquired_at: str = "") -> CanonicalCellRecord:
    """Build the ``Unknown``-technology record: only role and timestamp are kept."""
    return CanonicalCellRecord(technology=RadioTechnology.UNKNOWN, role=role, acquired_at=acquired_at)


def _coerce_raw(raw: Any, technology: RadioTechnology) -> RawCellBase:
    """Return *raw* as the model for *technology*, or raise :class:`MalformedRecordError`."""
    if isinstance(raw, RawCellBase):
        if raw.technology is not technology:
            raise MalformedRecordError(
                f"{raw.technology.value} measurement tagged as {technology.value}",
                technology=technology.value,
            )
        return raw

    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"Unsupported raw measurement type {type(raw).__name__}", technology=technology.value)

    model_cls = RAW_MODELS.get(technology)
    if model_cls is None:
        raise MalformedRecordError(
            f"Unrecognized technology tag {raw.get('technology')!r}",
            technology=str(raw.get("technology") or ""),
        )

    tag = raw.get("technology")
    if tag is not None and RadioTechnology(tag) is not technology:
        raise MalformedRecordError(f"{tag!r} measurement tagged as {technology.value}", technology=str(tag))

    try:
        return model_cls.model_validate({**raw, "technology": technology.value})
    except ValidationError as exc:
        raise MalformedRecordError(
            f"{technology.value} measurement does not fit its shape: {exc.error_count()} error(s)",
            technology=technology.value,
        ) from exc


def normalize(raw: RawCellBase | Mapping[str, Any], technology: RadioTechnology | str) -> CanonicalCellRecord:
    """Map a technology-tagged raw measurement into a canonical record.

    Never raises for bad input: a malformed measurement is logged and
    recorded as ``Unknown`` with only its role and timestamp kept.
    """
    declared = technology
    technology = RadioTechnology(technology)

    if technology is RadioTechnology.UNKNOWN and RadioTechnology.is_known(declared):
        return unknown_record(_role_of(raw), _timestamp_of(raw))

    try:
        cell = _coerce_raw(raw, technology)
    except MalformedRecordError as exc:
        _logger.warning("Malformed measurement recorded as Unknown: %s", exc)
        return unknown_record(_role_of(raw), _timestamp_of(raw))

    fields = _NORMALIZERS[technology](cell)
    fields.update(_network_fields(cell))
    fields["signal_bucket"] = signal_bucket(technology, fields)
    fields["consolidated_rsrp"] = consolidated_rsrp(
        fields.get("rsrp"), fields.get("ss_rsrp"), fields.get("csi_rsrp"), fields.get("rssi")
    )
    fields["consolidated_rsrq"] = consolidated_rsrq(fields.get("rsrq"), fields.get("ss_rsrq"), fields.get("csi_rsrq"))
    fields["consolidated_sinr"] = consolidated_sinr(fields.get("sinr"), fields.get("ss_sinr"), fields.get("csi_sinr"))

    return CanonicalCellRecord(
        technology=technology,
        role=cell.connection_status,
        acquired_at=cell.timestamp or "",
        **fields,
    )


def normalize_measurement(raw: RawCellBase | Mapping[str, Any]) -> CanonicalCellRecord:
    """Normalize a measurement using its own ``technology`` tag."""
    if isinstance(raw, RawCellBase):
        return normalize(raw, raw.technology)
    tag = raw.get("technology") if isinstance(raw, Mapping) else None
    return normalize(raw, tag if isinstance(tag, str) else "")
