"""Tests for model parsing with CellBaseModel + CellEnum."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from netsense.models import (
    CanonicalCellRecord,
    CategorizedBatch,
    ConnectionRole,
    DeviceState,
    EmptyResultCondition,
    RadioTechnology,
    RawLteCell,
    RawNrCell,
    RawWcdmaCell,
    SimpleFallbackRecord,
    SimState,
    diagnose_empty_result,
    is_sentinel,
    parse_raw_measurement,
)

# ------------------------------------------------------------------
# CellEnum
# ------------------------------------------------------------------


class TestCellEnum:
    def test_unknown_value_falls_back(self) -> None:
        assert RadioTechnology("WiMAX") == RadioTechnology.UNKNOWN

    def test_aliases_resolve_case_insensitively(self) -> None:
        assert RadioTechnology("5G") is RadioTechnology.NR
        assert RadioTechnology("td-scdma") is RadioTechnology.TDSCDMA
        assert RadioTechnology("lte") is RadioTechnology.LTE
        assert ConnectionRole("PrimaryConnection") is ConnectionRole.SERVING
        assert ConnectionRole("NoneConnection") is ConnectionRole.NEIGHBORING
        assert ConnectionRole("secondary") is ConnectionRole.SECONDARY

    def test_is_known(self) -> None:
        assert RadioTechnology.is_known("GSM") is True
        assert RadioTechnology.is_known("Unknown") is True
        assert RadioTechnology.is_known("bogus") is False

    def test_display_name(self) -> None:
        assert RadioTechnology.NR.display_name == "5G NR"
        assert RadioTechnology.TDSCDMA.display_name == "TDS-CDMA"

    def test_sim_state_numeric_codes(self) -> None:
        assert DeviceState.model_validate({"simState": 5}).sim_state is SimState.READY
        assert DeviceState.model_validate({"simState": "1"}).sim_state is SimState.ABSENT


# ------------------------------------------------------------------
# Sentinels
# ------------------------------------------------------------------


@pytest.mark.parametrize("value", [None, "", "--", "N/A", " n/a ", math.nan, 2_147_483_647, 9_223_372_036_854_775_807])
def test_sentinel_values(value: object) -> None:
    assert is_sentinel(value) is True


@pytest.mark.parametrize("value", [0, -85, "310", False])
def test_real_values_are_not_sentinels(value: object) -> None:
    assert is_sentinel(value) is False


# ------------------------------------------------------------------
# Raw measurements
# ------------------------------------------------------------------


class TestRawMeasurement:
    def test_union_dispatches_on_technology(self) -> None:
        cell = parse_raw_measurement(
            {
                "technology": "LTE",
                "connectionStatus": "PrimaryConnection",
                "timestamp": 1_700_000_000_000,
                "network": {"mcc": 310, "mnc": "260", "iso": "us"},
                "band": {"downlinkEarfcn": 5230},
                "pci": 101,
                "signal": {"rsrp": -95, "rsrq": "--", "snr": 2_147_483_647},
            }
        )

        assert isinstance(cell, RawLteCell)
        assert cell.connection_status is ConnectionRole.SERVING
        assert cell.timestamp == "1700000000000"
        assert cell.network is not None and cell.network.mcc == "310"
        assert cell.signal.rsrp == -95
        assert cell.signal.rsrq is None
        assert cell.signal.snr is None
        assert cell.raw["pci"] == 101

    def test_union_accepts_aliases(self) -> None:
        assert isinstance(parse_raw_measurement({"technology": "5G"}), RawNrCell)
        assert isinstance(parse_raw_measurement({"technology": "umts"}), RawWcdmaCell)

    def test_union_rejects_unknown_tag(self) -> None:
        with pytest.raises(ValidationError):
            parse_raw_measurement({"technology": "WiMAX"})

    def test_model_rejects_foreign_tag(self) -> None:
        with pytest.raises(ValidationError):
            RawLteCell.model_validate({"technology": "GSM"})


# ------------------------------------------------------------------
# Canonical records and batches
# ------------------------------------------------------------------


class TestCanonicalCellRecord:
    def test_records_are_immutable(self) -> None:
        record = CanonicalCellRecord(technology=RadioTechnology.LTE, rsrp=-90)
        with pytest.raises(ValidationError):
            record.rsrp = -80  # type: ignore[misc]

    def test_rejects_signal_fields_of_other_technologies(self) -> None:
        with pytest.raises(ValidationError):
            CanonicalCellRecord(technology=RadioTechnology.LTE, ss_rsrp=-90)
        with pytest.raises(ValidationError):
            CanonicalCellRecord(technology=RadioTechnology.GSM, rsrp=-90)

    def test_unknown_record_carries_only_role_and_timestamp(self) -> None:
        record = CanonicalCellRecord(role=ConnectionRole.SERVING, acquired_at="t1")
        assert record.technology is RadioTechnology.UNKNOWN
        with pytest.raises(ValidationError):
            CanonicalCellRecord(pci="7")

    def test_na_bandwidth_is_kept(self) -> None:
        record = CanonicalCellRecord(technology=RadioTechnology.NR, bandwidth_label="N/A")
        assert record.bandwidth_label == "N/A"

    def test_signal_bucket_range(self) -> None:
        with pytest.raises(ValidationError):
            CanonicalCellRecord(technology=RadioTechnology.LTE, signal_bucket=5)


class TestCategorizedBatch:
    def test_fallback_only_on_empty_batch(self) -> None:
        record = CanonicalCellRecord(technology=RadioTechnology.LTE)
        with pytest.raises(ValidationError):
            CategorizedBatch(all=[record], fallback=[SimpleFallbackRecord()])

    def test_diagnostic_only_on_empty_batch(self) -> None:
        with pytest.raises(ValidationError):
            CategorizedBatch(fallback=[SimpleFallbackRecord()], diagnostic=EmptyResultCondition.NO_SIM)

    def test_flags(self) -> None:
        empty = CategorizedBatch(diagnostic=EmptyResultCondition.NO_SIGNAL)
        assert empty.is_empty is True
        assert empty.from_fallback is False

        fallback = CategorizedBatch(fallback=[SimpleFallbackRecord(rssi=-70)])
        assert fallback.is_empty is False
        assert fallback.from_fallback is True


# ------------------------------------------------------------------
# Empty-result diagnostics
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"hasTelephony": False, "simState": "Ready"}, EmptyResultCondition.NO_RADIO),
        ({"hasTelephony": True, "simState": "Absent"}, EmptyResultCondition.NO_SIM),
        ({"hasTelephony": True, "simState": "Ready", "airplaneMode": True}, EmptyResultCondition.AIRPLANE_MODE),
        ({"hasTelephony": True, "simState": "Ready", "airplaneMode": False}, EmptyResultCondition.NO_SIGNAL),
        ({}, EmptyResultCondition.UNDETERMINED),
    ],
)
def test_diagnose_empty_result(payload: dict[str, object], expected: EmptyResultCondition) -> None:
    assert diagnose_empty_result(DeviceState.model_validate(payload)) is expected


def test_diagnose_without_device_state() -> None:
    assert diagnose_empty_result(None) is EmptyResultCondition.UNDETERMINED
