import asyncio
import functools
import logging
import time
from typing import Awaitable, Callable, Iterable, Sequence

from .models import ProbeError, ProbeOutcome, ScanConfig, ScanSummary
from .probe import build_session, probe
from .results import Sink, is_interesting
from .targets import generate, normalize_base

log = logging.getLogger("dirprobe.scanner")

Prober = Callable[[str], Awaitable[ProbeOutcome]]


async def _worker(
    todo: asyncio.Queue, done: asyncio.Queue, gate: asyncio.Semaphore, prober: Prober
) -> None:
    while True:
        url = await todo.get()
        if url is None:
            return
        try:
            outcome = await prober(url)
        except Exception as e:
            log.warning("prober crashed on %s: %r", url, e)
            outcome = ProbeOutcome(url=url, error=ProbeError.OTHER, detail=repr(e))
        finally:
            gate.release()
        await done.put(outcome)


async def run(candidates: Iterable[str], config: ScanConfig, prober: Prober, sink: Sink) -> ScanSummary:
    """
    Drive every candidate through `prober` with at most `config.concurrency`
    probes admitted at once. Outcomes reach `sink` in completion order.
    """
    gate = asyncio.Semaphore(config.concurrency)
    todo: asyncio.Queue = asyncio.Queue()
    done: asyncio.Queue = asyncio.Queue(maxsize=config.concurrency)
    workers = [
        asyncio.create_task(_worker(todo, done, gate, prober))
        for _ in range(config.concurrency)
    ]

    async def feed():
        try:
            for url in candidates:
                # slot is taken before the work is handed out, released by the worker
                await gate.acquire()
                todo.put_nowait(url)
        finally:
            for _ in workers:
                todo.put_nowait(None)

    async def close():
        try:
            await feed()
            await asyncio.gather(*workers)
        finally:
            await done.put(None)

    started = time.monotonic()
    summary = ScanSummary()
    closer = asyncio.create_task(close())
    try:
        while True:
            outcome = await done.get()
            if outcome is None:
                break
            summary.total += 1
            if outcome.failed:
                summary.failed += 1
            elif is_interesting(outcome, config.interesting_statuses):
                summary.interesting += 1
            await sink(outcome)
        await closer
    finally:
        for t in (closer, *workers):
            t.cancel()
        # room for the closing sentinel when the consumer stopped early
        while not done.empty():
            done.get_nowait()
    summary.elapsed_seconds = time.monotonic() - started
    return summary


async def scan(base: str, words: Sequence[str], config: ScanConfig, sink: Sink) -> ScanSummary:
    base = normalize_base(base)
    candidates = generate(base, words, config.extensions)
    log.info(
        "scanning %s: %d words, extensions=%s, concurrency=%d, method=%s",
        base, len(words), ",".join(config.extensions) or "-", config.concurrency,
        "GET" if config.force_get else "HEAD",
    )
    async with build_session(config) as session:
        prober = functools.partial(probe, session, config=config)
        summary = await run(candidates, config, prober, sink)
    log.info(
        "scan done: %d probed, %d interesting, %d failed in %.1fs",
        summary.total, summary.interesting, summary.failed, summary.elapsed_seconds,
    )
    return summary
