"""
Batch translation queue.

A ``TranslationRunner`` owns the queue, progress counters and cancellation flag
of one project's translation run. Rows are split into fixed-size batches and
sent to the provider strictly one batch at a time; rate limits are retried with
exponential backoff, every other failure marks the batch's rows ``error`` and
the run moves on.
"""

import asyncio
import inspect
import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Sequence, Set

from ..config import get_settings
from ..errors import (
    BatchTimeoutError,
    MissingTemplateError,
    ProviderNotConfiguredError,
    is_rate_limit_error,
)
from ..models.row import (
    Batch,
    BatchItemResult,
    BatchOptions,
    GlossaryTerm,
    QueueProgress,
    Row,
    RowUpdate,
    SourceItem,
    Template,
)
from ..models.status import RowStatus
from ..prompts.glossary import filter_relevant
from ..providers.base import BaseProvider
from .events import ProgressEvent

logger = logging.getLogger("wordflow.runner")

UpdateRowsFn = Callable[[str, List[RowUpdate]], Any]
FetchGlossaryFn = Callable[[], List[GlossaryTerm]]
SleepFn = Callable[[float], Awaitable[None]]

MAX_EVENT_HISTORY = 500


def partition_rows(rows: Sequence[Row], batch_size: int) -> List[List[Row]]:
    """Split rows into ``ceil(N / batch_size)`` consecutive chunks."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [list(rows[i:i + batch_size]) for i in range(0, len(rows), batch_size)]


class TranslationRunner:
    """Queue and processing loop for one project's translation run."""

    def __init__(
        self,
        project_id: str,
        provider: BaseProvider,
        update_rows: UpdateRowsFn,
        fetch_glossary: Optional[FetchGlossaryFn] = None,
        batch_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        base_backoff: Optional[float] = None,
        batch_timeout: Optional[float] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        settings = get_settings()
        self.project_id = project_id
        self.provider = provider
        self.update_rows = update_rows
        self.fetch_glossary = fetch_glossary
        self.batch_size = batch_size or settings.batch_size
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.base_backoff = settings.base_backoff_seconds if base_backoff is None else base_backoff
        timeout = settings.batch_timeout_seconds if batch_timeout is None else batch_timeout
        self.batch_timeout = timeout if timeout and timeout > 0 else None
        self._sleep = sleep

        self.queue: Deque[Batch] = deque()
        self.progress = QueueProgress()
        self.is_processing = False
        self.is_cancelled = False
        self.events: Deque[ProgressEvent] = deque(maxlen=MAX_EVENT_HISTORY)
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[asyncio.Queue] = []
        self._sink_tasks: Set[asyncio.Future] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def backoff_delay(self, retry_count: int) -> float:
        return self.base_backoff * (2 ** retry_count)

    def enqueue(
        self,
        rows: Sequence[Row],
        template: Optional[Template],
        target_languages: Sequence[str],
        source_language: Optional[str] = None,
        batch_size: Optional[int] = None,
    ) -> int:
        """
        Queue rows for translation and start processing if idle.

        Configuration problems are raised before any row is touched. Rows are
        marked ``queued`` synchronously. Enqueueing while a run is processing
        appends to that run instead of starting a second loop.
        ``batch_size`` overrides the runner default for this call only.

        Returns:
            Number of batches added

        Raises:
            ProviderNotConfiguredError: The provider has no credential
            MissingTemplateError: No template or an empty prompt body
            ValueError: No target languages
            RuntimeError: Called outside a running event loop while idle
        """
        if not self.provider.initialize():
            raise ProviderNotConfiguredError(self.provider.name)
        if template is None or not (template.prompt_body or "").strip():
            raise MissingTemplateError()
        target_languages = list(target_languages)
        if not target_languages:
            raise ValueError("At least one target language is required")
        rows = list(rows)
        if not rows:
            return 0
        loop = None if self.is_processing else asyncio.get_running_loop()

        source_language = source_language or get_settings().default_source_language
        glossary = list(self.fetch_glossary()) if self.fetch_glossary else []
        batches = [
            Batch(
                batch_id=str(uuid.uuid4()),
                project_id=self.project_id,
                rows=chunk,
                template=template,
                target_languages=target_languages,
                source_language=source_language,
                glossary=glossary,
            )
            for chunk in partition_rows(rows, batch_size or self.batch_size)
        ]

        self._set_status([row.id for row in rows], RowStatus.QUEUED)
        self.queue.extend(batches)

        if self.is_processing:
            self.progress.total += len(batches)
        else:
            self.progress = QueueProgress(current=0, total=len(batches))
            self._start(loop)

        logger.info(
            "Project %s: queued %d rows in %d batches (%s -> %s)",
            self.project_id, len(rows), len(batches), source_language, target_languages,
        )
        self._emit("enqueued", {
            "rows": len(rows),
            "batches": len(batches),
            "target_languages": target_languages,
            "glossary_terms": len(glossary),
        })
        return len(batches)

    def cancel(self, abort: bool = False) -> int:
        """
        Cancel the run.

        Every row still in the queue, including the in-flight batch, goes back
        to ``pending``. The in-flight provider call is left to finish and its
        result is discarded; ``abort=True`` cancels the task instead.

        Returns:
            Number of rows reverted to pending
        """
        if not self.queue and not self.is_processing:
            return 0

        self.is_cancelled = True
        self._generation += 1

        row_ids = [row.id for batch in self.queue for row in batch.rows]
        self._set_status(row_ids, RowStatus.PENDING)
        self.queue.clear()

        if abort and self._task is not None and not self._task.done():
            self._task.cancel()

        self._reset()
        logger.info("Project %s: run cancelled, %d rows reverted to pending", self.project_id, len(row_ids))
        self._emit("cancelled", {"reverted_rows": len(row_ids)})
        return len(row_ids)

    async def wait_until_idle(self) -> None:
        """Wait for the current processing task, including a cancelled run's last request."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def snapshot(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "provider": self.provider.name,
            "is_processing": self.is_processing,
            "is_cancelled": self.is_cancelled,
            "progress": self.progress.model_dump(),
            "queued_batches": len(self.queue),
            "queued_rows": sum(len(batch.rows) for batch in self.queue),
        }

    def subscribe(self) -> asyncio.Queue:
        listener: asyncio.Queue = asyncio.Queue()
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: asyncio.Queue) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Processing loop
    # ------------------------------------------------------------------

    def _start(self, loop: asyncio.AbstractEventLoop) -> None:
        self._task = loop.create_task(self._process_queue(self._generation))
        self.is_processing = True
        self.is_cancelled = False

    def _stale(self, generation: int) -> bool:
        return generation != self._generation

    def _reset(self) -> None:
        self.is_processing = False
        self.progress = QueueProgress()

    async def _process_queue(self, generation: int) -> None:
        try:
            while self.queue and not self._stale(generation):
                batch = self.queue[0]
                outcome = await self._process_batch(batch, generation)
                if self._stale(generation):
                    return
                self.queue.popleft()
                self.progress.current += 1
                self._emit(outcome.pop("event"), {
                    "batch_id": batch.batch_id,
                    "progress": self.progress.model_dump(),
                    **outcome,
                })
        finally:
            if not self._stale(generation):
                self._reset()
                logger.info("Project %s: queue drained", self.project_id)
                self._emit("idle", {})

    async def _process_batch(self, batch: Batch, generation: int) -> Dict[str, Any]:
        self._set_status(batch.row_ids, RowStatus.TRANSLATING)
        self._emit("batch_start", {
            "batch_id": batch.batch_id,
            "rows": len(batch.rows),
            "progress": self.progress.model_dump(),
        })

        try:
            results = await self._run_with_retry(batch, generation)
        except Exception as e:
            if self._stale(generation):
                return {"event": "batch_discarded"}
            logger.error("Project %s: batch %s failed: %s", self.project_id, batch.batch_id, e)
            self._notify(batch.project_id, [
                RowUpdate(id=row_id, changes={"status": RowStatus.ERROR.value, "error_message": str(e) or type(e).__name__})
                for row_id in batch.row_ids
            ])
            return {"event": "batch_failed", "error": str(e) or type(e).__name__, "error_type": type(e).__name__}

        if results is None or self._stale(generation):
            return {"event": "batch_discarded"}

        updates = self._result_updates(batch, results)
        self._notify(batch.project_id, updates)
        partial = sum(1 for update in updates if update.changes["status"] == RowStatus.PARTIAL.value)
        logger.info("Project %s: batch %s translated (%d rows, %d partial)",
                    self.project_id, batch.batch_id, len(updates), partial)
        return {"event": "batch_completed", "rows": len(updates), "partial_rows": partial}

    async def _run_with_retry(self, batch: Batch, generation: int) -> Optional[List[BatchItemResult]]:
        """Translate a batch, retrying the same batch on rate limits. None means cancelled."""
        retry_count = 0
        while True:
            try:
                return await self._translate(batch)
            except Exception as e:
                if self._stale(generation) or not is_rate_limit_error(e) or retry_count >= self.max_retries:
                    raise
                delay = self.backoff_delay(retry_count)
                logger.warning("Project %s: rate limited, retry %d/%d in %.1fs",
                               self.project_id, retry_count + 1, self.max_retries, delay)
                self._emit("batch_retry", {
                    "batch_id": batch.batch_id,
                    "retry": retry_count + 1,
                    "delay_seconds": delay,
                })
                await self._sleep(delay)
                retry_count += 1
                if self._stale(generation):
                    return None

    async def _translate(self, batch: Batch) -> List[BatchItemResult]:
        items = [SourceItem.from_row(row) for row in batch.rows]
        options = BatchOptions(
            source_language=batch.source_language,
            target_languages=batch.target_languages,
            template=batch.template,
            glossary_terms=filter_relevant(batch.glossary, [item.text for item in items]),
        )
        call = self.provider.generate_batch(items, options)
        if self.batch_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.batch_timeout)
        except asyncio.TimeoutError as e:
            raise BatchTimeoutError(f"Batch timed out after {self.batch_timeout:g}s") from e

    def _result_updates(self, batch: Batch, results: List[BatchItemResult]) -> List[RowUpdate]:
        translated_at = datetime.now(timezone.utc).isoformat()
        wanted = set(batch.row_ids)
        updates = []
        for result in results:
            if result.id not in wanted:
                continue
            status = RowStatus.PARTIAL if result.is_partial else RowStatus.REVIEW
            updates.append(RowUpdate(id=result.id, changes={
                "translations": {
                    lang: slot.model_dump(mode="json") for lang, slot in result.translations.items()
                },
                "status": status.value,
                "template_used": batch.template.name,
                "translated_at": translated_at,
                "error_message": None,
            }))
        return updates

    # ------------------------------------------------------------------
    # Row sink and events
    # ------------------------------------------------------------------

    def _set_status(self, row_ids: Sequence[str], status: RowStatus) -> None:
        if row_ids:
            self._notify(self.project_id, [RowUpdate(id=row_id, changes={"status": status.value}) for row_id in row_ids])

    def _notify(self, project_id: str, updates: List[RowUpdate]) -> None:
        """Fire-and-forget write to the row sink; failures are logged, never retried."""
        try:
            result = self.update_rows(project_id, updates)
        except Exception:
            logger.exception("Project %s: row update failed", project_id)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._sink_tasks.add(task)
            task.add_done_callback(self._sink_tasks.discard)
            task.add_done_callback(self._log_sink_failure)

    def _log_sink_failure(self, task: "asyncio.Future") -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Project %s: row update failed: %s", self.project_id, task.exception())

    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        event = ProgressEvent(event_type, {"project_id": self.project_id, **data})
        self.events.append(event)
        for listener in list(self._listeners):
            listener.put_nowait(event)


class RunRegistry:
    """One runner per project; independent projects never serialize against each other."""

    def __init__(self):
        self._runners: Dict[str, TranslationRunner] = {}

    def get(self, project_id: str) -> Optional[TranslationRunner]:
        return self._runners.get(project_id)

    def get_or_create(
        self,
        project_id: str,
        provider: BaseProvider,
        update_rows: UpdateRowsFn,
        fetch_glossary: Optional[FetchGlossaryFn] = None,
        **kwargs,
    ) -> TranslationRunner:
        """
        Return the project's runner, creating it on first use.

        An idle runner picks up the requested provider; a busy one keeps its
        own so that appended batches stay on the same backend.
        """
        runner = self._runners.get(project_id)
        if runner is None:
            runner = TranslationRunner(project_id, provider, update_rows, fetch_glossary, **kwargs)
            self._runners[project_id] = runner
        elif not runner.is_processing:
            runner.provider = provider
        return runner

    def active_runs(self) -> List[Dict[str, Any]]:
        return [runner.snapshot() for runner in self._runners.values() if runner.is_processing]

    def clear(self) -> None:
        for runner in self._runners.values():
            runner.cancel(abort=True)
        self._runners.clear()


# Global registry instance
run_registry = RunRegistry()


def get_run_registry() -> RunRegistry:
    """Get the global run registry."""
    return run_registry
