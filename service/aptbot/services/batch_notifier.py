"""
Batch Notifier Service.

Delivers the full residents list of a chat (/aptslist) to one user as a
series of private messages:

1. Group records by apartment number, one rendered line per apartment
2. Pack lines into Telegram-sized messages (4096 chars); a line is only cut
   (at contact boundaries) when it alone is over the limit
3. Drain the messages through a single worker with a fixed delay between sends

While a batch is being delivered the shared BatchState reports busy and the
dispatcher drops every incoming update. Only one batch runs per process.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from .registry import ApartmentRecord
from ..telegram_bot.logging_config import bot_logger as logger
from ..telegram_bot.messages import MessageCatalog
from ..utils.contacts import render_contacts

TELEGRAM_MESSAGE_LIMIT = 4096
BATCH_PARSE_MODE = "Markdown"

SendFunc = Callable[[int, str, Optional[str]], Awaitable[None]]


# ============================================
# Batch state (dispatch gate)
# ============================================

class BatchStatus(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    FAILED = "failed"


class BatchState:
    """
    Process-wide batch state: idle -> sending -> idle | failed.

    A batch stuck in `sending` longer than timeout_seconds (e.g. its worker
    died) is moved to `failed` the next time someone asks, so dispatch cannot
    stay blocked forever. Each begin() hands out a token; finish() with a stale
    token is ignored so a late worker cannot clear a newer batch.
    """

    def __init__(self, timeout_seconds: float = 600, clock: Callable[[], float] = time.monotonic):
        self.timeout_seconds = timeout_seconds
        self.status = BatchStatus.IDLE
        self._clock = clock
        self._started_at: Optional[float] = None
        self._token = 0

    def is_busy(self) -> bool:
        if self.status is not BatchStatus.SENDING:
            return False

        if self._clock() - self._started_at > self.timeout_seconds:
            logger.warning(
                f"Batch send exceeded {self.timeout_seconds}s, releasing dispatch gate"
            )
            self.status = BatchStatus.FAILED
            self._started_at = None
            return False

        return True

    def try_begin(self) -> Optional[int]:
        """Move to `sending`; returns a token, or None if a batch is running."""
        if self.is_busy():
            return None
        self._token += 1
        self.status = BatchStatus.SENDING
        self._started_at = self._clock()
        return self._token

    def finish(self, token: int, ok: bool) -> None:
        if token != self._token or self.status is not BatchStatus.SENDING:
            return
        self.status = BatchStatus.IDLE if ok else BatchStatus.FAILED
        self._started_at = None


# ============================================
# Rendering and chunking
# ============================================

def group_by_apartment(records: Iterable[ApartmentRecord]) -> list[tuple[int, list[ApartmentRecord]]]:
    """Partition records by apartment number, keeping first-seen order."""
    groups: dict[int, list[ApartmentRecord]] = {}
    for record in records:
        groups.setdefault(record.apartment_number, []).append(record)
    return list(groups.items())


def render_apartment_lines(records: Iterable[ApartmentRecord], catalog: MessageCatalog) -> list[str]:
    prefix = catalog["apartment_prefix"]
    placeholder = catalog["contact_placeholder"]
    return [
        f"{prefix} {number}: {render_contacts(residents, placeholder)}"
        for number, residents in group_by_apartment(records)
    ]


def split_long_line(line: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """
    Cut an apartment line longer than `limit` at its ", " contact separators.

    Joining the pieces with ", " gives the line back. A single contact that is
    itself over the limit is cut at the limit.
    """
    if len(line) <= limit:
        return [line]

    pieces: list[str] = []
    current = ""
    for contact in line.split(", "):
        candidate = f"{current}, {contact}" if current else contact
        if current and len(candidate) > limit:
            pieces.append(current)
            current = contact
        else:
            current = candidate
    pieces.append(current)

    return [
        piece[start:start + limit]
        for piece in pieces
        for start in range(0, len(piece), limit)
    ]


def build_tg_messages(lines: Iterable[str], limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """
    Pack lines into newline-joined messages of at most `limit` characters.

    A line is never split: one longer than the limit becomes a message of its
    own. The last (possibly empty) chunk is always emitted, so an empty input
    gives [""].
    """
    chunks: list[str] = []
    current: list[str] = []
    current_length = 0

    for line in lines:
        if current and current_length + len(line) + 1 > limit:
            chunks.append("\n".join(current))
            current = []
            current_length = 0

        current_length += len(line) + (1 if current else 0)
        current.append(line)

    chunks.append("\n".join(current))
    return chunks


# ============================================
# Delivery
# ============================================

class JobOutcome(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class BatchJob:
    """One /aptslist delivery."""
    recipient_id: int
    chunks: list[str]
    cursor: int = 0  # chunks delivered so far
    outcome: JobOutcome = JobOutcome.PENDING


class BatchNotifier:
    """Serial, throttled delivery of one batch at a time."""

    def __init__(
        self,
        send: SendFunc,
        state: BatchState,
        catalog: MessageCatalog,
        message_limit: int = TELEGRAM_MESSAGE_LIMIT,
        delay_seconds: float = 2.0
    ):
        self.send = send
        self.state = state
        self.catalog = catalog
        self.message_limit = message_limit
        self.delay_seconds = delay_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_busy(self) -> bool:
        return self.state.is_busy()

    def prepare_messages(self, records: list[ApartmentRecord]) -> list[str]:
        if not records:
            return [self.catalog["nobody_in_chat"]]
        lines = [
            piece
            for line in render_apartment_lines(records, self.catalog)
            for piece in split_long_line(line, self.message_limit)
        ]
        return build_tg_messages(lines, self.message_limit)

    def start(self, recipient_id: int, records: list[ApartmentRecord]) -> Optional[BatchJob]:
        """
        Begin delivering `records` to recipient_id in the background.

        Returns None without sending anything if another batch is running.
        """
        chunks = self.prepare_messages(records)

        token = self.state.try_begin()
        if token is None:
            return None

        job = BatchJob(recipient_id=recipient_id, chunks=chunks)
        logger.info(
            f"[aptslist] Starting batch: recipient={recipient_id}, "
            f"records={len(records)}, messages={len(chunks)}"
        )
        self._task = asyncio.create_task(self._run(job, token))
        return job

    async def _run(self, job: BatchJob, token: int) -> None:
        queue: asyncio.Queue[str] = asyncio.Queue()
        for chunk in job.chunks:
            queue.put_nowait(chunk)

        ok = False
        try:
            while not queue.empty():
                chunk = queue.get_nowait()
                if job.cursor > 0:
                    await asyncio.sleep(self.delay_seconds)
                await self.send(job.recipient_id, chunk, BATCH_PARSE_MODE)
                job.cursor += 1

            job.outcome = JobOutcome.DELIVERED
            ok = True
            logger.info(f"[aptslist] Batch delivered: recipient={job.recipient_id}, messages={job.cursor}")

        except asyncio.CancelledError:
            job.outcome = JobOutcome.CANCELLED
            logger.warning(f"[aptslist] Batch cancelled after {job.cursor}/{len(job.chunks)} messages")
            raise

        except Exception as e:
            job.outcome = JobOutcome.FAILED
            logger.error(
                f"[aptslist] Batch aborted after {job.cursor}/{len(job.chunks)} messages: {e}",
                exc_info=True
            )
            await self._send_failure_notice(job)

        finally:
            self.state.finish(token, ok)

    async def _send_failure_notice(self, job: BatchJob) -> None:
        """One best-effort notice; a failure here is only logged."""
        await asyncio.sleep(self.delay_seconds)
        try:
            await self.send(job.recipient_id, self.catalog["generic_failure"], None)
        except Exception as e:
            logger.warning(f"[aptslist] Failed to send failure notice to {job.recipient_id}: {e}")

    async def join(self) -> None:
        """Wait for the current batch (if any) to finish."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel an in-flight batch and release the state."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        await self.join()
        self._task = None
