"""Debounced autosave for an editable document.

The coordinator keeps a local draft of a document's fields, waits for a
quiet period after the last edit and then writes the draft to a store. It
runs on an asyncio event loop: timers and writes are scheduled on the loop
and a lock keeps at most one write in flight.

The store needs two methods, either plain or returning awaitables::

    save_document(document_id, fields)
    toggle_flag(document_id, flag, value)

``JournalService`` provides both.
"""

import asyncio
import inspect
import json
from typing import Any, Callable, Mapping, Optional

from flipbudget.logging_config import get_logger

logger = get_logger("autosave")

DEFAULT_QUIET_PERIOD = 1.0


def serialize_draft(draft: Mapping[str, Any]) -> str:
    """Canonical text form of a draft, used to detect redundant writes."""
    return json.dumps(draft, sort_keys=True, default=str)


async def _call(func: Callable, *args: Any) -> Any:
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class AutosaveCoordinator:
    """Debounce edits to one document and persist them.

    Attributes:
        is_saving: True while a write is in flight
        has_unsaved_changes: True while the draft differs from what was last
            written, including after a failed write
        last_error: Exception from the most recent failed write, if any
    """

    def __init__(
        self,
        store: Any,
        document_id: int,
        initial: Optional[Mapping[str, Any]] = None,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_saved: Optional[Callable[[Mapping[str, Any]], None]] = None,
    ):
        """Initialize the coordinator.

        Args:
            store: Object providing save_document and toggle_flag
            document_id: ID of the document being edited
            initial: Field values as currently persisted
            quiet_period: Seconds to wait after the last edit before saving
            on_error: Called with the exception when a write fails
            on_saved: Called with the written fields after a successful write
        """
        self.store = store
        self.document_id = document_id
        self.quiet_period = quiet_period
        self.on_error = on_error
        self.on_saved = on_saved

        self._draft: dict[str, Any] = dict(initial or {})
        self._snapshot = serialize_draft(self._draft)
        self._timer: Optional[asyncio.TimerHandle] = None
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        self.is_saving = False
        self.has_unsaved_changes = False
        self.last_error: Optional[Exception] = None

    @property
    def draft(self) -> dict[str, Any]:
        return dict(self._draft)

    @property
    def last_persisted_snapshot(self) -> str:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    def update(self, **fields: Any) -> None:
        """Record an edit and restart the quiet period.

        Must be called from inside a running event loop.

        Raises:
            RuntimeError: If the coordinator has been closed
        """
        if self._closed:
            raise RuntimeError("Autosave coordinator is closed")
        self._draft = {**self._draft, **fields}
        self.has_unsaved_changes = serialize_draft(self._draft) != self._snapshot
        self._schedule()

    def reset(self, values: Mapping[str, Any]) -> None:
        """Load values as both draft and persisted state without saving."""
        self._cancel_timer()
        self._draft = dict(values)
        self._snapshot = serialize_draft(self._draft)
        self.has_unsaved_changes = False
        self.last_error = None

    async def flush(self) -> bool:
        """Write the current draft now if it differs from the last write.

        A flush requested while another is writing waits for it and then
        writes whatever the draft is at that point.

        Returns:
            True if the store holds the current draft, False if the write
            failed or the coordinator is closed
        """
        async with self._lock:
            if self._closed:
                return False

            draft = self._draft
            serialized = serialize_draft(draft)
            if serialized == self._snapshot:
                logger.debug("Document %s unchanged, skipping save", self.document_id)
                self.has_unsaved_changes = False
                return True

            self.is_saving = True
            try:
                await _call(self.store.save_document, self.document_id, dict(draft))
            except Exception as exc:
                if self._closed:
                    logger.debug("Save of document %s failed after close: %s", self.document_id, exc)
                    return False
                self.last_error = exc
                self.has_unsaved_changes = True
                logger.warning("Autosave of document %s failed: %s", self.document_id, exc)
                if self.on_error is not None:
                    self.on_error(exc)
                return False
            finally:
                self.is_saving = False

            if self._closed:
                return True
            self._snapshot = serialized
            self.last_error = None
            # An edit made while the write was in flight is still unsaved
            self.has_unsaved_changes = serialize_draft(self._draft) != self._snapshot
            logger.debug("Saved document %s", self.document_id)
            if self.on_saved is not None:
                self.on_saved(draft)
            return True

    async def blur(self) -> bool:
        """Skip the remaining quiet period and save now."""
        self._cancel_timer()
        return await self.flush()

    async def toggle(self, flag: str, value: bool) -> None:
        """Write a boolean flag immediately, outside the draft."""
        await _call(self.store.toggle_flag, self.document_id, flag, value)

    async def close(self, flush_pending: bool = False) -> None:
        """Stop the coordinator.

        A pending save is dropped unless ``flush_pending`` is set. A write
        already in flight still completes but no longer updates this object.
        """
        if self._closed:
            return
        if flush_pending:
            await self.blur()
        self._cancel_timer()
        self._closed = True

    def _schedule(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_period, self._quiet_period_elapsed)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _quiet_period_elapsed(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._timed_flush_done)

    def _timed_flush_done(self, task: asyncio.Future) -> None:
        """Report errors from a timer-fired flush, which nobody awaits."""
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Timed autosave of document %s failed: %s",
                self.document_id,
                exc,
                exc_info=exc,
            )
