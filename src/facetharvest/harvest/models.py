"""Data model of a facet harvest: records, descriptors, session state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from ..config.settings import REQUIRED_STABLE_ROUNDS

_WS_RE = re.compile(r"\s+")

ID_SOURCES = ("label_for", "input_data_option")


def normalize_label(text: Optional[str]) -> str:
    if not text:
        return ""
    return _WS_RE.sub(" ", text).strip()


@dataclass(frozen=True)
class OptionRecord:
    label: str
    id: Optional[str]

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.label, self.id)

    @property
    def is_complete(self) -> bool:
        return bool(self.label) and bool(self.id)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"label": self.label, "id": self.id}


@dataclass(frozen=True)
class FacetDescriptor:
    """Static locators and id rule for one selection list."""

    name: str
    trigger: str
    list_container: str
    close_control: str
    id_rule: str = "numeric"
    id_source: str = "label_for"

    def __post_init__(self) -> None:
        if self.id_source not in ID_SOURCES:
            raise ValueError(f"{self.name}: unknown id_source {self.id_source!r}")


class ConvergenceState(Enum):
    GROWING = "growing"
    STABLE_1 = "stable_1"
    STABLE_2 = "stable_2"


class HarvestStatus(Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


@dataclass(frozen=True)
class HarvestResult:
    facet: str
    records: Tuple[OptionRecord, ...]
    status: HarvestStatus
    rounds: int
    reason: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return self.status is HarvestStatus.PARTIAL

    def to_dicts(self) -> List[Dict[str, Optional[str]]]:
        return [r.to_dict() for r in self.records]


@dataclass
class HarvestSession:
    """Per-facet accumulation and debounce counters.

    A round whose unique count equals the previous round's advances the
    debounce; any change resets it. ``REQUIRED_STABLE_ROUNDS`` unchanged rounds
    in a row mean the list stopped loading.
    """

    facet: str
    accumulated: Dict[Tuple[str, str], OptionRecord] = field(default_factory=dict)
    previous_count: int = 0
    stable_rounds: int = 0
    rounds: int = 0

    def merge(self, batch: Iterable[OptionRecord]) -> int:
        """Add unseen complete records; returns how many were new."""
        added = 0
        for record in batch:
            if not record.is_complete:
                continue
            if record.key in self.accumulated:
                continue
            self.accumulated[record.key] = record
            added += 1
        return added

    def observe_round(self) -> ConvergenceState:
        self.rounds += 1
        size = len(self.accumulated)
        if size == self.previous_count:
            self.stable_rounds += 1
        else:
            self.stable_rounds = 0
            self.previous_count = size
        return self.state

    @property
    def state(self) -> ConvergenceState:
        if self.stable_rounds >= REQUIRED_STABLE_ROUNDS:
            return ConvergenceState.STABLE_2
        if self.stable_rounds == 1:
            return ConvergenceState.STABLE_1
        return ConvergenceState.GROWING

    @property
    def converged(self) -> bool:
        return self.state is ConvergenceState.STABLE_2

    def records(self) -> List[OptionRecord]:
        return list(self.accumulated.values())

    def finalize(self, status: HarvestStatus, reason: Optional[str] = None) -> HarvestResult:
        return HarvestResult(
            facet=self.facet,
            records=tuple(self.records()),
            status=status,
            rounds=self.rounds,
            reason=reason,
        )
