"""
In-process queue and worker pool for face media ingestion.
"""
import asyncio
from typing import Any, Dict, List, Optional

from sentinela.core.config import settings
from sentinela.core.logging import get_logger
from sentinela.domain.value_objects.ingest import ImageSource, IngestJob
from sentinela.services.media_ingest import MediaIngestService

logger = get_logger(__name__)


class IngestQueue:
    """Bounded job queue drained by a pool of asyncio workers.

    Producers call :meth:`on_face_media_created` after the media row is
    committed; the call returns immediately and never raises. Workers hand
    each job to :class:`MediaIngestService`. Jobs are not retried: a failed
    or dropped job leaves its media row without an embedding.

    Example:
        ```python
        queue = IngestQueue(ingest_service)
        await queue.start()
        queue.on_face_media_created(42, ImageSource(url=media.url))
        ...
        await queue.stop()
        ```
    """

    def __init__(
        self,
        ingest_service: MediaIngestService,
        workers: Optional[int] = None,
        max_size: Optional[int] = None,
        shutdown_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the queue.

        Args:
            ingest_service: Service processing each job
            workers: Number of worker tasks
            max_size: Queue capacity; submissions beyond it are dropped
            shutdown_timeout: Seconds :meth:`stop` waits for pending jobs
        """
        self.ingest_service = ingest_service
        self.workers = workers or settings.INGEST_WORKERS
        self.shutdown_timeout = (
            settings.INGEST_SHUTDOWN_TIMEOUT if shutdown_timeout is None else shutdown_timeout
        )
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size or settings.INGEST_QUEUE_SIZE)
        self._tasks: List[asyncio.Task] = []

        # Stats tracking
        self.submitted = 0
        self.processed = 0
        self.succeeded = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        """Spawn the worker tasks."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"ingest-worker-{i}")
            for i in range(self.workers)
        ]
        logger.info("Ingest workers started", workers=self.workers)

    async def stop(self) -> None:
        """Let pending jobs finish (bounded by the shutdown timeout), then cancel workers."""
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Ingest queue not drained before shutdown",
                pending=self._queue.qsize()
            )
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Ingest workers stopped", **self.stats())

    def submit(self, job: IngestJob) -> bool:
        """Enqueue a job without waiting.

        Returns:
            False if the queue is full and the job was dropped
        """
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.error(
                "Ingest queue full, media stays unindexed",
                media_id=job.media_id,
                queue_size=self._queue.maxsize
            )
            return False
        self.submitted += 1
        logger.debug("Ingest job queued", media_id=job.media_id, pending=self._queue.qsize())
        return True

    def on_face_media_created(self, media_id: int, source: ImageSource) -> None:
        """Fire-and-forget hook for newly created FACE media."""
        try:
            self.submit(IngestJob(media_id=media_id, source=source))
        except Exception as e:
            logger.error(
                "Failed to schedule face ingestion",
                media_id=media_id,
                error=str(e),
                exc_info=True
            )

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    def stats(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "pending": self._queue.qsize(),
            "submitted": self.submitted,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "dropped": self.dropped,
        }

    async def _worker(self, worker_id: int) -> None:
        while True:
            job: IngestJob = await self._queue.get()
            try:
                stored = await self.ingest_service.ingest(job)
                if stored:
                    self.succeeded += 1
                else:
                    self.failed += 1
            except Exception as e:
                self.failed += 1
                logger.error(
                    "Ingest worker error",
                    worker_id=worker_id,
                    media_id=job.media_id,
                    error=str(e),
                    exc_info=True
                )
            finally:
                self.processed += 1
                self._queue.task_done()
