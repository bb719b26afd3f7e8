"""Cleaning result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class DeleteReport:
    """Outcome of deleting the contents of one directory."""

    freed_bytes: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_tuple(self) -> tuple[int, int]:
        return self.freed_bytes, self.skipped


@dataclass(slots=True)
class CleanOutcome:
    """Result of cleaning one category."""

    category_id: str
    freed_bytes: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_tuple(self) -> tuple[int, int]:
        return self.freed_bytes, self.skipped


@dataclass(slots=True)
class CleanReport:
    """Outcomes of one clean run, in the order the categories were cleaned."""

    outcomes: list[CleanOutcome] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0

    @property
    def total_freed(self) -> int:
        return sum(o.freed_bytes for o in self.outcomes)

    @property
    def total_skipped(self) -> int:
        return sum(o.skipped for o in self.outcomes)
