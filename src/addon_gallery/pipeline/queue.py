"""Sequential, paced enrichment queue.

Items are drained one at a time by a single asyncio task. Before every
provider call the queue sleeps for a fixed pacing interval, which keeps
request bursts away from the rate-limited enrichment service. Failures are
logged and recorded as outcomes; they never stop the queue.
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Dict, Iterable, List, Optional, Set

from ..logging_config import get_logger
from ..models import EnrichmentRecord, WorkItem

logger = get_logger(__name__)

Provider = Callable[[WorkItem], Awaitable[EnrichmentRecord]]
CatalogSource = Callable[[], Awaitable[List[WorkItem]]]
Listener = Callable[["QueueEvent"], None]


@dataclass(frozen=True)
class ItemOutcome:
    """Result of processing a single work item."""
    item_id: int
    record: Optional[EnrichmentRecord] = None
    error: Optional[str] = None
    started_at: float = 0.0
    finished_at: float = 0.0

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class QueueEvent:
    """Notification sent to queue listeners.

    ``kind`` is one of ``started``, ``completed`` or ``failed``.
    """
    kind: str
    item_id: int
    outcome: Optional[ItemOutcome] = None


class EnrichmentQueue:
    """FIFO of work items drained one at a time with fixed pacing."""

    def __init__(
        self,
        provider: Provider,
        pacing_seconds: float = 1.0,
        catalog_source: Optional[CatalogSource] = None,
        provider_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the queue.

        Args:
            provider: Async callable producing an enrichment record for an item
            pacing_seconds: Delay awaited before every provider call
            catalog_source: Optional async callable supplying the initial items
            provider_timeout: Seconds before a provider call counts as failed;
                None waits indefinitely
            sleep: Awaitable sleep used for pacing (replaceable in tests)
            clock: Time source for outcome timestamps
        """
        self.provider = provider
        self.pacing_seconds = pacing_seconds
        self.catalog_source = catalog_source
        self.provider_timeout = provider_timeout
        self._sleep = sleep
        self._clock = clock

        self._pending: Deque[WorkItem] = deque()
        self._in_flight: Set[int] = set()
        self._records: Dict[int, EnrichmentRecord] = {}
        self._outcomes: List[ItemOutcome] = []
        self._listeners: List[Listener] = []
        self._draining = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._task: Optional[asyncio.Task] = None

    # Read-only views for display

    def is_in_flight(self, item_id: int) -> bool:
        return item_id in self._in_flight

    def get_record(self, item_id: int) -> Optional[EnrichmentRecord]:
        return self._records.get(item_id)

    @property
    def records(self) -> Dict[int, EnrichmentRecord]:
        return dict(self._records)

    @property
    def in_flight(self) -> Set[int]:
        return set(self._in_flight)

    @property
    def pending(self) -> List[WorkItem]:
        return list(self._pending)

    @property
    def outcomes(self) -> List[ItemOutcome]:
        return list(self._outcomes)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for queue events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Producers

    def enqueue_all(self, items: Iterable[WorkItem]) -> int:
        """
        Append items to the pending sequence and start draining.

        Items that already have a record are skipped. Must be called from
        within a running event loop when draining should start right away;
        otherwise call ``drain()`` explicitly later.

        Returns:
            Number of items actually appended
        """
        added = 0
        for item in items:
            if item.id in self._records:
                logger.debug(f"Skipping {item.name}: already enriched")
                continue
            self._pending.append(item)
            added += 1

        if added:
            logger.debug(f"Enqueued {added} items ({len(self._pending)} pending)")
            self.start()
        return added

    async def load(self) -> int:
        """Fetch items from the catalog source and enqueue them all."""
        if self.catalog_source is None:
            raise RuntimeError("No catalog source configured")
        items = await self.catalog_source()
        logger.info(f"Loaded {len(items)} items from catalog")
        return self.enqueue_all(items)

    def start(self) -> Optional[asyncio.Task]:
        """Schedule a background drain task unless one is already running."""
        if self._draining or (self._task is not None and not self._task.done()):
            return self._task
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; draining deferred")
            return None
        self._task = loop.create_task(self.drain())
        return self._task

    async def join(self) -> None:
        """Wait until the queue has been fully drained.

        Waits on any active drain, whether it was scheduled by ``start()`` or
        awaited directly by a caller, and drains leftover items itself.
        """
        while self._task is not None and not self._task.done():
            await self._task
        while self._pending or self._draining:
            if self._draining:
                await self._idle.wait()
            else:
                await self.drain()

    # Consumer

    async def drain(self) -> None:
        """
        Process pending items one at a time until the queue is empty.

        A call made while another drain is active returns immediately. The
        draining flag is set before each item is dequeued and cleared once
        that item is done, then checked again for the next one.
        """
        if self._draining:
            return
        self._idle.clear()
        try:
            while self._pending and not self._draining:
                self._draining = True
                try:
                    item = self._pending.popleft()
                    await self._process(item)
                finally:
                    self._draining = False
        finally:
            self._idle.set()

    async def _process(self, item: WorkItem) -> None:
        if item.id in self._records:
            logger.debug(f"Skipping {item.name}: already enriched")
            return

        self._in_flight.add(item.id)
        started_at = self._clock()
        self._emit(QueueEvent("started", item.id))
        try:
            await self._sleep(self.pacing_seconds)
            record = await self._call_provider(item)
        except Exception as e:
            outcome = ItemOutcome(
                item_id=item.id,
                error=f"{type(e).__name__}: {e}",
                started_at=started_at,
                finished_at=self._clock(),
            )
            logger.warning(f"Enrichment failed for {item.name}: {outcome.error}")
        else:
            # First record wins
            self._records.setdefault(item.id, record)
            outcome = ItemOutcome(
                item_id=item.id,
                record=record,
                started_at=started_at,
                finished_at=self._clock(),
            )
            logger.debug(f"Enriched {item.name}")
        finally:
            self._in_flight.discard(item.id)

        self._outcomes.append(outcome)
        self._emit(QueueEvent("completed" if outcome.ok else "failed", item.id, outcome))

    async def _call_provider(self, item: WorkItem) -> EnrichmentRecord:
        if self.provider_timeout is None:
            return await self.provider(item)
        return await asyncio.wait_for(self.provider(item), timeout=self.provider_timeout)

    def _emit(self, event: QueueEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Queue listener error on {event.kind} for {event.item_id}: {e}")
