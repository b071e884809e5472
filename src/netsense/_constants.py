"""Internal constants shared across the library."""

from __future__ import annotations

#: Seconds between the end of one acquisition cycle and the start of the next.
REFRESH_INTERVAL: float = 3.0

#: Neighbouring cells shown next to each serving cell in grouped rows/exports.
MAX_NEIGHBORING_CELLS = 3

DEFAULT_BRIDGE_URL = "http://127.0.0.1:8765"
USER_AGENT = "netsense/1"

# Android ``CellInfo.UNAVAILABLE`` (int) and ``CellInfo.UNAVAILABLE_LONG``.
UNAVAILABLE_INT = 2_147_483_647
UNAVAILABLE_LONG = 9_223_372_036_854_775_807

NOT_AVAILABLE = "N/A"

# ------------------------------------------------------------------
# Signal-quality ladders (dBm, inclusive lower bounds -> bucket)
# ------------------------------------------------------------------

LTE_NR_LADDER: tuple[tuple[float, int], ...] = ((-80, 4), (-90, 3), (-100, 2), (-110, 1))
LEGACY_LADDER: tuple[tuple[float, int], ...] = ((-75, 4), (-85, 3), (-95, 2), (-100, 1))

# ------------------------------------------------------------------
# NR bandwidth estimate from downlink NR-ARFCN (inclusive, first match wins)
# ------------------------------------------------------------------

NR_BANDWIDTH_BY_ARFCN: tuple[tuple[int, int, str], ...] = (
    (151_600, 160_600, "100 MHz (n78, 3.5 GHz)"),
    (173_800, 178_800, "50 MHz (n79, 4.8 GHz)"),
    (422_000, 434_000, "200 MHz (n260, 39 GHz)"),
)
UNKNOWN_BANDWIDTH = "Unknown Bandwidth"

# ------------------------------------------------------------------
# Export layout
# ------------------------------------------------------------------

CSV_SERVING_COLUMNS: tuple[str, ...] = (
    "Timestamp",
    "Net",
    "ConnectionStatus",
    "Frequency",
    "BandWidth",
    "MCC",
    "MNC",
    "ISO",
    "ECI",
    "eNb",
    "CID",
    "TAC",
    "PCI",
    "RSRP",
    "RSRQ",
    "SINR",
)
CSV_NEIGHBOR_FIELDS: tuple[str, ...] = ("rsrp", "pci", "rsrq", "sinr", "freq")


def csv_header() -> list[str]:
    """Return the export header including the neighbour column blocks."""
    header = list(CSV_SERVING_COLUMNS)
    for index in range(1, MAX_NEIGHBORING_CELLS + 1):
        header.extend(f"nc{index}_{name}" for name in CSV_NEIGHBOR_FIELDS)
    return header
