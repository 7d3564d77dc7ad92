"""Eligibility decisions and two-phase removal of console call sites."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from parse.treesitter_calls import extract_console_calls
from parse.treesitter_js import parse_source
from removal.models import (
    RemovalOutcome,
    SiteDecision,
    SiteState,
    SkipReason,
)
from removal.regenerate import (
    Edit,
    apply_edits,
    placeholder_replacement,
    statement_deletion,
)

if TYPE_CHECKING:
    from parse.treesitter_calls import CallSite
    from parse.treesitter_js import ModuleKind, SourceUnit
    from removal.models import RemovalSelection
    from vcs.oracles import OracleCache


def skip_reason(
    site: CallSite,
    selection: RemovalSelection,
    *,
    path: str | None = None,
    oracles: OracleCache | None = None,
) -> SkipReason | None:
    """Return why ``site`` must be retained, or None if it is eligible.

    Predicates are checked in a fixed order and combine with logical AND.
    A shadowed receiver vetoes removal before anything else is consulted.
    Git filters without a path or oracle cache exclude the site.
    """
    if not site.is_global_receiver:
        return SkipReason.SHADOWED
    if site.method not in selection.methods:
        return SkipReason.METHOD_NOT_SELECTED
    if selection.skip_side_effects and site.has_side_effects:
        return SkipReason.SIDE_EFFECT
    if selection.filter_by_author:
        if oracles is None or path is None:
            return SkipReason.NOT_AUTHOR
        authors = oracles.line_authors(path)
        if not authors.is_authored_by(site.start_line, selection.current_user_email):
            return SkipReason.NOT_AUTHOR
    if selection.filter_by_uncommitted:
        if oracles is None or path is None:
            return SkipReason.COMMITTED
        if not oracles.uncommitted_ranges(path).contains(site.start_line):
            return SkipReason.COMMITTED
    return None


def _removal_edit(
    unit: SourceUnit, site: CallSite, removed_open: dict[int, bool]
) -> Edit:
    """Build the edit for ``site`` and record what its deletion leaves behind."""
    if not (site.is_statement_position and site.statement_span is not None):
        return placeholder_replacement(site.start_byte, site.end_byte)

    start, end = site.statement_span
    # A deleted predecessor hands its own predecessor's state forward.
    if site.prev_statement_start in removed_open:
        open_before = removed_open[site.prev_statement_start]
    else:
        open_before = site.follows_open_statement
    keep_separator = (
        site.statement_in_list and open_before and site.precedes_continuation
    )
    if site.statement_in_list:
        removed_open[start] = open_before and not keep_separator
    return statement_deletion(
        unit.source_bytes,
        start,
        end,
        in_statement_list=site.statement_in_list,
        keep_separator=keep_separator,
    )


def plan_removals(
    unit: SourceUnit,
    sites: list[CallSite],
    selection: RemovalSelection,
    oracles: OracleCache | None = None,
) -> tuple[list[SiteDecision], list[Edit]]:
    """Decide every site and build the edits, without touching the source.

    Sites must be in source order. A site lying inside a span that is
    already being removed is subsumed: no decision counts it and no edit
    is produced for it.
    """
    decisions: list[SiteDecision] = []
    edits: list[Edit] = []
    removed_open: dict[int, bool] = {}
    for site in sites:
        if any(edit.covers(site.start_byte, site.end_byte) for edit in edits):
            decisions.append(SiteDecision(site=site, state=SiteState.SUBSUMED))
            continue

        reason = skip_reason(site, selection, path=unit.path, oracles=oracles)
        if reason is not None:
            decisions.append(
                SiteDecision(site=site, state=SiteState.RETAINED, reason=reason)
            )
            continue

        edits.append(_removal_edit(unit, site, removed_open))
        decisions.append(SiteDecision(site=site, state=SiteState.REMOVED))
    return decisions, edits


def remove_from_unit(
    unit: SourceUnit,
    selection: RemovalSelection,
    oracles: OracleCache | None = None,
) -> RemovalOutcome:
    """Remove eligible console calls from an already parsed unit."""
    sites = extract_console_calls(unit)
    decisions, edits = plan_removals(unit, sites, selection, oracles)

    removed = sum(1 for d in decisions if d.state is SiteState.REMOVED)
    skipped: Counter[SkipReason] = Counter(
        d.reason for d in decisions if d.reason is not None
    )

    text: str | None = None
    if removed:
        text = apply_edits(unit.source_bytes, edits).decode("utf8")

    return RemovalOutcome(
        path=unit.path,
        text=text,
        removed_count=removed,
        skipped=skipped,
        decisions=tuple(decisions),
    )


def remove_from_source(
    source: str,
    selection: RemovalSelection,
    *,
    path: str | None = None,
    kind: ModuleKind | None = None,
    oracles: OracleCache | None = None,
) -> RemovalOutcome:
    """Parse ``source`` and remove eligible console calls.

    Raises:
        ParseFailure: If the source cannot be parsed.
    """
    unit = parse_source(source, path=path, kind=kind)
    return remove_from_unit(unit, selection, oracles)


__all__ = ["plan_removals", "remove_from_source", "remove_from_unit", "skip_reason"]
