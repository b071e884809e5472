"""Per-cycle batch and tabular row models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from netsense.models.cell import CanonicalCellRecord, SimpleFallbackRecord
from netsense.models.device import EmptyResultCondition


class CategorizedBatch(BaseModel):
    """Records from one acquisition cycle, partitioned by connection role.

    ``serving``, ``secondary`` and ``neighboring`` partition ``all``.
    ``fallback`` is only set when ``all`` is empty, and ``diagnostic``
    only when the batch holds nothing at all.
    """

    model_config = ConfigDict(frozen=True)

    serving: list[CanonicalCellRecord] = Field(default_factory=list)
    secondary: list[CanonicalCellRecord] = Field(default_factory=list)
    neighboring: list[CanonicalCellRecord] = Field(default_factory=list)
    all: list[CanonicalCellRecord] = Field(default_factory=list)
    fallback: list[SimpleFallbackRecord] | None = None
    diagnostic: EmptyResultCondition | None = None

    @model_validator(mode="after")
    def _check_fallback_exclusive(self) -> CategorizedBatch:
        if self.fallback is not None and self.all:
            raise ValueError("fallback records are only allowed when no canonical records exist")
        if self.diagnostic is not None and (self.all or self.fallback):
            raise ValueError("diagnostic is only allowed on an empty batch")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.all and not self.fallback

    @property
    def from_fallback(self) -> bool:
        return self.fallback is not None


class GroupedRow(BaseModel):
    """A serving cell and the neighbouring cells acquired at the same time."""

    model_config = ConfigDict(frozen=True)

    serving: CanonicalCellRecord
    neighbors: list[CanonicalCellRecord] = Field(default_factory=list)
