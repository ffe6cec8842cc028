"""Bounded-concurrency form submission engine."""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence, Set

import httpx

from .config import EngineConfig, FieldSpec, Summary
from .errors import GenerationError
from .generator import FormGenerator
from .writer import ReportWriter


logger = logging.getLogger(__name__)


class SubmissionEngine:
    """Repeatedly posts freshly generated forms until stopped.

    At most ``config.max_open`` submissions are in flight at once. The
    engine stops spawning as soon as ``stop_event`` is set; submissions
    already dispatched get ``config.shutdown_grace`` seconds to finish
    before they are cancelled.
    """

    def __init__(self, fields: Sequence[FieldSpec], config: EngineConfig,
                 generator: Optional[FormGenerator] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 stop_event: Optional[asyncio.Event] = None,
                 writer: Optional[ReportWriter] = None,
                 clock: Callable[[], float] = time.monotonic):
        if config.max_open < 1:
            raise ValueError(f"max_open must be at least 1, got {config.max_open}")

        self.fields = tuple(fields)
        self.config = config
        self.generator = generator or FormGenerator(seed=config.seed)
        self.client = client
        self.stop_event = stop_event or asyncio.Event()
        self.writer = writer or ReportWriter()
        self.clock = clock

        self.permits = asyncio.Semaphore(config.max_open)
        # Only touched from the event loop thread
        self.sent = 0
        self.failed = 0
        self.spawned = 0
        self.tasks: Set[asyncio.Task] = set()
        self._started: Optional[float] = None

    def stop(self) -> None:
        """Ask the engine to stop spawning submissions."""
        self.stop_event.set()

    def snapshot(self) -> Summary:
        """Current counters and time since ``run`` started."""
        elapsed = 0.0 if self._started is None else self.clock() - self._started
        return Summary(sent=self.sent, failed=self.failed, elapsed=elapsed)

    async def run(self) -> Summary:
        """Submit forms until stopped; return the final summary."""
        owns_client = self.client is None
        if owns_client:
            self.client = self._build_client()

        try:
            return await self._run_loop()
        finally:
            await self._drain()
            if owns_client:
                await self.client.aclose()

    async def _run_loop(self) -> Summary:
        self._started = self.clock()
        last_report = self._started
        logger.info("Posting to %s with at most %d open requests",
                    self.config.url, self.config.max_open)

        while not self.stop_event.is_set():
            if not await self._acquire():
                break

            now = self.clock()
            if now - last_report >= self.config.report_interval:
                self.writer.report(self.snapshot(), interim=True)
                last_report = now

            self._spawn()

        summary = self.snapshot()
        self.writer.report(summary)
        return summary

    async def _acquire(self) -> bool:
        """Take one permit, or return False once a stop is requested."""
        if not self.permits.locked():
            await self.permits.acquire()
            return True

        acquire = asyncio.ensure_future(self.permits.acquire())
        stop = asyncio.ensure_future(self.stop_event.wait())
        try:
            await asyncio.wait((acquire, stop), return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not acquire.done():
                acquire.cancel()

        if not acquire.done() or acquire.cancelled():
            return False
        if self.stop_event.is_set():
            self.permits.release()
            return False
        return True

    def _spawn(self) -> None:
        task = asyncio.create_task(self._submit())
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        self.spawned += 1

    async def _submit(self) -> None:
        """One generate-then-post attempt. Holds a permit until it ends."""
        try:
            params = self.generator.generate(self.fields)
            files = [(name, (None, value)) for name, value in params.items()]
            response = await asyncio.wait_for(
                self.client.post(self.config.url, files=files),
                timeout=self.config.timeout)
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            self.failed += 1
            logger.debug("Request failed: %r", e)
        except GenerationError as e:
            self.failed += 1
            logger.error("Could not generate form: %s", e)
        except Exception:
            self.failed += 1
            logger.exception("Submission crashed")
        else:
            if response.is_success:
                self.sent += 1
            else:
                self.failed += 1
                logger.debug("Request rejected with status %d", response.status_code)
        finally:
            self.permits.release()

    async def _drain(self) -> None:
        """Let in-flight submissions finish, cancelling stragglers."""
        if not self.tasks:
            return
        pending: List[asyncio.Task] = list(self.tasks)
        _, still_running = await asyncio.wait(pending, timeout=self.config.shutdown_grace)
        if still_running:
            logger.info("Cancelling %d unfinished requests", len(still_running))
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout, connect=self.config.timeout),
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            headers={"User-Agent": self.config.user_agent},
            limits=httpx.Limits(max_connections=self.config.max_open),
        )
