"""Role partitioning and time-grouping of canonical records."""

from __future__ import annotations

from collections.abc import Sequence

from netsense._constants import MAX_NEIGHBORING_CELLS
from netsense.models.batch import CategorizedBatch, GroupedRow
from netsense.models.cell import CanonicalCellRecord, ConnectionRole


def categorize(records: Sequence[CanonicalCellRecord]) -> CategorizedBatch:
    """Partition *records* by connection role.

    Every record lands in exactly one role list.  Records whose role is
    ``Unknown`` are listed as neighbouring: they were seen but are not
    part of the connection.  ``all`` keeps the input order.
    """
    serving: list[CanonicalCellRecord] = []
    secondary: list[CanonicalCellRecord] = []
    neighboring: list[CanonicalCellRecord] = []
    for record in records:
        if record.role is ConnectionRole.SERVING:
            serving.append(record)
        elif record.role is ConnectionRole.SECONDARY:
            secondary.append(record)
        else:
            neighboring.append(record)

    return CategorizedBatch(
        serving=serving,
        secondary=secondary,
        neighboring=neighboring,
        all=list(records),
    )


def group_by_acquisition_time(
    records: Sequence[CanonicalCellRecord],
    *,
    max_neighbors: int = MAX_NEIGHBORING_CELLS,
) -> list[GroupedRow]:
    """Pair serving cells with neighbours measured at the same instant.

    Groups keep the order in which their ``acquired_at`` key first
    appears.  Each serving record in a group yields one row carrying up
    to *max_neighbors* of the group's neighbouring records.  A group with
    no serving record yields a single row headed by its first record; that
    record still counts among the row's neighbours when it is one.
    """
    groups: dict[str, list[CanonicalCellRecord]] = {}
    for record in records:
        groups.setdefault(record.acquired_at, []).append(record)

    rows: list[GroupedRow] = []
    for cells in groups.values():
        servers = [cell for cell in cells if cell.role is ConnectionRole.SERVING]
        neighbors = [cell for cell in cells if cell.role in (ConnectionRole.NEIGHBORING, ConnectionRole.UNKNOWN)]

        if not servers:
            servers = [cells[0]]

        for server in servers:
            rows.append(GroupedRow(serving=server, neighbors=neighbors[:max_neighbors]))
    return rows
