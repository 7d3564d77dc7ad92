"""Selection, decision and outcome models for console call removal."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from contract.console import DEFAULT_REMOVAL_METHODS

if TYPE_CHECKING:
    from parse.treesitter_calls import CallSite


class SideEffectPolicy(str, Enum):
    """What to do with calls whose arguments may have side effects."""

    SKIP = "skip"
    REMOVE_ANYWAY = "remove"


class SkipReason(str, Enum):
    """Why a discovered call site was retained."""

    SHADOWED = "shadowed"
    METHOD_NOT_SELECTED = "method_not_selected"
    SIDE_EFFECT = "side_effect"
    NOT_AUTHOR = "not_author"
    COMMITTED = "committed"


class SiteState(str, Enum):
    """Final state of a call site after planning and mutation."""

    REMOVED = "removed"
    RETAINED = "retained"
    SUBSUMED = "subsumed"


@dataclass(frozen=True)
class RemovalSelection:
    """Caller-chosen methods, side-effect policy and git filter toggles."""

    methods: frozenset[str] = frozenset(DEFAULT_REMOVAL_METHODS)
    side_effects: SideEffectPolicy = SideEffectPolicy.SKIP
    filter_by_author: bool = False
    filter_by_uncommitted: bool = False
    current_user_email: str | None = None

    @property
    def skip_side_effects(self) -> bool:
        return self.side_effects is SideEffectPolicy.SKIP

    @property
    def uses_git(self) -> bool:
        return self.filter_by_author or self.filter_by_uncommitted


@dataclass(frozen=True)
class SiteDecision:
    """Planner verdict for one call site."""

    site: CallSite
    state: SiteState
    reason: SkipReason | None = None


@dataclass
class RemovalOutcome:
    """Result of removing console calls from one source text."""

    path: str | None
    text: str | None
    removed_count: int = 0
    skipped: Counter[SkipReason] = field(default_factory=Counter)
    decisions: tuple[SiteDecision, ...] = ()

    @property
    def changed(self) -> bool:
        return self.text is not None

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())


__all__ = [
    "RemovalOutcome",
    "RemovalSelection",
    "SideEffectPolicy",
    "SiteDecision",
    "SiteState",
    "SkipReason",
]
