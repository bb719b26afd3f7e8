"""PC TuneUp data models."""

from pctuneup.models.category import (
    Browser,
    Category,
    FixedPaths,
    NoPaths,
    PathRule,
    ProfileSubdirs,
    SystemAction,
    VolumeSubdirs,
)
from pctuneup.models.scan_result import ScanResult, SizeReport
from pctuneup.models.clean_result import CleanOutcome, CleanReport, DeleteReport

__all__ = [
    "Browser",
    "Category",
    "CleanOutcome",
    "CleanReport",
    "DeleteReport",
    "FixedPaths",
    "NoPaths",
    "PathRule",
    "ProfileSubdirs",
    "ScanResult",
    "SizeReport",
    "SystemAction",
    "VolumeSubdirs",
]
