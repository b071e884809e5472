"""Device radio state and empty-result diagnostics."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from netsense.models._base import CellBaseModel, CellEnum


class SimState(CellEnum):
    """SIM card state as reported by the native telephony API."""

    UNKNOWN = "Unknown"
    ABSENT = "Absent"
    PIN_REQUIRED = "PinRequired"
    PUK_REQUIRED = "PukRequired"
    NETWORK_LOCKED = "NetworkLocked"
    READY = "Ready"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        # Android TelephonyManager.SIM_STATE_* codes.
        return {"0": "Unknown", "1": "Absent", "2": "PinRequired", "3": "PukRequired", "4": "NetworkLocked", "5": "Ready"}


class EmptyResultCondition(CellEnum):
    """Why a cycle produced no measurements from either provider.

    This is a diagnostic state, not an error: the scheduler keeps running.
    """

    NO_RADIO = "NoRadio"
    NO_SIM = "NoSim"
    AIRPLANE_MODE = "AirplaneMode"
    NO_SIGNAL = "NoSignal"
    UNDETERMINED = "Undetermined"
    UNKNOWN = "Unknown"


class DeviceState(CellBaseModel):
    """Snapshot of the device conditions that gate cell visibility."""

    has_telephony: bool | None = None
    sim_state: SimState = SimState.UNKNOWN
    airplane_mode: bool | None = None
    network_operator: str | None = Field(
        default=None,
        validation_alias=AliasChoices("networkOperator", "network_operator", "operator"),
    )

    @field_validator("sim_state", mode="before")
    @classmethod
    def _coerce_sim_state(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


def diagnose_empty_result(state: DeviceState | None) -> EmptyResultCondition:
    """Classify an all-empty cycle from the device state.

    Checks run from the most to the least fundamental cause; the first
    that applies wins.
    """
    if state is None:
        return EmptyResultCondition.UNDETERMINED
    if state.has_telephony is False:
        return EmptyResultCondition.NO_RADIO
    if state.sim_state not in (SimState.READY, SimState.UNKNOWN):
        return EmptyResultCondition.NO_SIM
    if state.airplane_mode:
        return EmptyResultCondition.AIRPLANE_MODE
    if state.has_telephony is None and state.sim_state is SimState.UNKNOWN and state.airplane_mode is None:
        return EmptyResultCondition.UNDETERMINED
    return EmptyResultCondition.NO_SIGNAL
