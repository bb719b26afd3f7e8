"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

from pctuneup.models.category import Category


@dataclass(slots=True)
class SizeReport:
    """Outcome of measuring a directory tree.

    ``errors`` lists the paths that could not be read. They contribute
    nothing to ``total_bytes`` and are never raised.
    """

    total_bytes: int = 0
    file_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Reclaimable size measured for one category."""

    category_id: str
    size_bytes: int
    category: Category

    @property
    def name(self) -> str:
        return self.category.name
