"""Console call removal: planning, regeneration and orchestration."""

from removal.models import (
    RemovalOutcome,
    RemovalSelection,
    SideEffectPolicy,
    SkipReason,
)
from removal.planner import remove_from_source, remove_from_unit
from removal.runner import remove_from_files

__all__ = [
    "RemovalOutcome",
    "RemovalSelection",
    "SideEffectPolicy",
    "SkipReason",
    "remove_from_files",
    "remove_from_source",
    "remove_from_unit",
]
