"""Fire-and-forget dispatcher for new-quote notification emails.

Key features:
- Non-blocking enqueue via asyncio.Queue.put_nowait()
- Graceful degradation (drop + log on queue full)
- Per-recipient retries with a fixed delay
- Counters for monitoring (sent, skipped, failed, dropped)
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from gulfquotes.core.context import RequestContext
from gulfquotes.core.logging import get_logger
from gulfquotes.email.schemas import EmailTag
from gulfquotes.utils.text import sanitize_tag_value, slugify

from .models import NewQuoteEmailJob, NotificationType


if TYPE_CHECKING:
    from gulfquotes.auth.models import User
    from gulfquotes.authors.service import AuthorService
    from gulfquotes.email.service import EmailService
    from gulfquotes.quotes.service import QuoteService


logger = get_logger(__name__)


class NotificationEmailDispatcher:
    """Background worker that emails followers about new quotes.

    Jobs are queued by ``NotificationService`` after the in-app rows are
    written. Delivery never blocks the request that created the quote.
    """

    def __init__(
        self,
        email_service: EmailService,
        author_service: AuthorService,
        quote_service: QuoteService | None = None,
        queue_size: int = 1000,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            email_service: Sender for the rendered emails
            author_service: Resolves the author profile slug
            quote_service: Resolves the quote slug and content; may be set
                after construction since quotes are built later at startup
            queue_size: Maximum pending jobs (jobs dropped when full)
            max_attempts: Attempts per recipient before giving up
            retry_delay: Seconds between attempts
        """
        self.email_service = email_service
        self.author_service = author_service
        self.quote_service = quote_service
        self.queue_size = queue_size
        self.max_attempts = max(max_attempts, 1)
        self.retry_delay = retry_delay

        self._queue: asyncio.Queue[NewQuoteEmailJob] = asyncio.Queue(maxsize=queue_size)
        self._running = False
        self._worker_task: asyncio.Task | None = None
        self._start_time: float = 0.0

        self._jobs_enqueued = 0
        self._jobs_processed = 0
        self._sent = 0
        self._skipped = 0
        self._failed = 0
        self._dropped = 0

    # ==========================================================================
    # Fire-and-forget enqueue
    # ==========================================================================

    def enqueue(self, job: NewQuoteEmailJob) -> bool:
        """Queue a job without waiting.

        Returns:
            True if queued, False if dropped
        """
        try:
            self._queue.put_nowait(job)
            self._jobs_enqueued += 1
            return True
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                "notification_email_queue_full",
                quote_id=str(job.quote_id),
                queue_size=self.queue_size,
                dropped_total=self._dropped,
            )
            return False

    # ==========================================================================
    # Background Worker
    # ==========================================================================

    async def start(self) -> None:
        """Start the background worker."""
        if self._running:
            logger.warning("notification_dispatcher_already_running")
            return

        self._running = True
        self._start_time = time.monotonic()
        self._worker_task = asyncio.create_task(
            self._worker_loop(),
            name="notification_email_worker",
        )
        logger.info(
            "notification_dispatcher_started",
            queue_size=self.queue_size,
            max_attempts=self.max_attempts,
        )

    async def stop(self) -> None:
        """Stop the background worker, abandoning jobs still queued."""
        if not self._running:
            return

        self._running = False

        if self._worker_task:
            self._worker_task.cancel()
            try:
                await asyncio.wait_for(self._worker_task, timeout=5.0)
            except TimeoutError:
                logger.warning("notification_dispatcher_stop_timeout")
            except asyncio.CancelledError:
                pass

        logger.info("notification_dispatcher_stopped", **self.stats())

    async def _worker_loop(self) -> None:
        while self._running:
            job = await self._queue.get()
            try:
                await self.process(job)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("notification_dispatcher_job_error", quote_id=str(job.quote_id))
            finally:
                self._queue.task_done()

    async def process(self, job: NewQuoteEmailJob) -> None:
        """Email every eligible follower in ``job``."""
        with RequestContext(request_id=job.request_id, correlation_id=str(job.quote_id)):
            eligible = [f for f in job.followers if self._eligible(f)]
            self._skipped += len(job.followers) - len(eligible)

            if not eligible:
                logger.debug("notification_email_no_recipients", quote_id=str(job.quote_id))
                self._jobs_processed += 1
                return

            quote = None
            if self.quote_service is not None:
                quote = await self.quote_service.get_by_id(job.quote_id)
            if quote is None:
                logger.warning("notification_email_quote_missing", quote_id=str(job.quote_id))
                self._skipped += len(eligible)
                self._jobs_processed += 1
                return

            profile = await self.author_service.get_by_id(job.author_profile_id)
            author_slug = profile.slug if profile else slugify(job.author_name)

            tags = [
                EmailTag(name="type", value="new_quote"),
                EmailTag(name="author", value=sanitize_tag_value(job.author_name)),
            ]

            for follower in eligible:
                if await self._deliver(follower, job, author_slug, quote, tags):
                    self._sent += 1
                else:
                    self._failed += 1

            self._jobs_processed += 1
            logger.info(
                "notification_emails_processed",
                quote_id=str(job.quote_id),
                recipients=len(eligible),
            )

    @staticmethod
    def _eligible(user: User) -> bool:
        return user.wants_email(NotificationType.NEW_QUOTE.value)

    async def _deliver(
        self,
        user: User,
        job: NewQuoteEmailJob,
        author_slug: str,
        quote,
        tags: list[EmailTag],
    ) -> bool:
        """Send to one recipient, retrying failed attempts."""
        for attempt in range(1, self.max_attempts + 1):
            response = await self.email_service.send_new_quote_email(
                to=user.email,
                user_name=user.name,
                author_name=job.author_name,
                author_slug=author_slug,
                quote_slug=quote.slug,
                quote_content=quote.content,
                tags=tags,
            )
            if response.success:
                return True

            logger.warning(
                "notification_email_attempt_failed",
                user_id=str(user.id),
                attempt=attempt,
                error=response.error,
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(self.retry_delay)

        return False

    # ==========================================================================
    # Status/Monitoring
    # ==========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def queue_length(self) -> int:
        return self._queue.qsize()

    def stats(self) -> dict:
        """Get dispatcher counters for monitoring."""
        return {
            "running": self._running,
            "queue_size": self.queue_size,
            "queue_length": self._queue.qsize(),
            "jobs_enqueued": self._jobs_enqueued,
            "jobs_processed": self._jobs_processed,
            "sent": self._sent,
            "skipped": self._skipped,
            "failed": self._failed,
            "dropped": self._dropped,
        }
