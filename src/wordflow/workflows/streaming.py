"""Server-Sent Events stream of a project's translation progress."""

import asyncio
from typing import AsyncGenerator, Dict

from .events import ProgressEvent
from .runner import TranslationRunner

HEARTBEAT_SECONDS = 15.0


async def stream_run_progress(
    runner: TranslationRunner,
    replay: bool = True,
    heartbeat: float = HEARTBEAT_SECONDS,
) -> AsyncGenerator[Dict[str, str], None]:
    """
    Stream progress events for a run.

    Past events are replayed first, then new ones are tailed until the run is
    idle or cancelled. An idle runner yields a single snapshot event.

    Yields:
        Event dicts for ``EventSourceResponse``
    """
    listener = runner.subscribe()
    try:
        if replay:
            for event in list(runner.events):
                yield event.to_sse()

        if not runner.is_processing:
            yield ProgressEvent("snapshot", runner.snapshot()).to_sse()
            return

        while True:
            try:
                event = await asyncio.wait_for(listener.get(), timeout=heartbeat)
            except asyncio.TimeoutError:
                yield ProgressEvent("heartbeat", {"progress": runner.progress.model_dump()}).to_sse()
                continue
            yield event.to_sse()
            if event.is_terminal:
                return
    finally:
        runner.unsubscribe(listener)
