"""Run one uploaded export through the reconciliation stages.

parse -> consolidate -> analyse -> match, producing a :class:`ReviewWorkspace`.
Input and configuration errors abort before any workspace exists.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from .consolidate import consolidate
from .matching import match_participants
from .presence import analyze_presence, detect_end_time
from .workspace import ReviewWorkspace

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rollcall.domain.model import RegistrationCandidate, WindowConfig
    from rollcall.domain.ports import ExportParser


log = logging.getLogger(__name__)


def build_workspace(
    text: str,
    config: WindowConfig,
    candidates: Sequence[RegistrationCandidate],
    exclusions: Sequence[str] = (),
    *,
    parser: ExportParser,
) -> ReviewWorkspace:
    config.validate()
    parsed = parser(text)

    if config.live_end is None:
        detected = detect_end_time(parsed.records)
        if detected is not None:
            log.info("No live end configured; using last leave time %s", detected)
            config = replace(config, live_end=detected)

    participants = consolidate(parsed.records, exclusions)
    analyses = {
        participant.display_name: analyze_presence(participant, config)
        for participant in participants
    }
    associations = match_participants(participants, candidates)

    workspace = ReviewWorkspace(
        config=config,
        participants={participant.display_name: participant for participant in participants},
        analyses=analyses,
        associations=associations,
        candidates=tuple(candidates),
        total_rows=parsed.total_rows,
        dropped_rows=parsed.dropped_rows,
    )
    summary = workspace.summary()
    log.info(
        "Training %s: %s participants (%s approved), auto=%s suggested=%s pending=%s",
        config.training_id,
        summary.consolidated,
        summary.approved,
        summary.auto_matched,
        summary.suggested,
        summary.pending,
    )
    return workspace


async def build_workspace_async(
    text: str,
    config: WindowConfig,
    candidates: Sequence[RegistrationCandidate],
    exclusions: Sequence[str] = (),
    *,
    parser: ExportParser,
) -> ReviewWorkspace:
    """Await :func:`build_workspace` from a worker thread; not cancellable mid-run."""

    return await asyncio.to_thread(
        build_workspace, text, config, candidates, exclusions, parser=parser
    )
