"""
Single-candidate HTTP probe.

A probe walks a small state machine: TRY_HEAD -> (405) -> TRY_GET -> DONE.
The 405 transition is the only retry; network failures end the probe with
a classified error outcome instead of a status.
"""
import asyncio
import logging
from enum import Enum
from typing import Dict, Optional

import aiohttp

from . import __version__
from .models import ProbeError, ProbeOutcome, ScanConfig

log = logging.getLogger("dirprobe.probe")

USER_AGENT = f"dirprobe/{__version__}"


class ProbeState(str, Enum):
    TRY_HEAD = "HEAD"
    TRY_GET = "GET"
    DONE = "DONE"


def initial_state(force_get: bool) -> ProbeState:
    return ProbeState.TRY_GET if force_get else ProbeState.TRY_HEAD


def next_state(state: ProbeState, status: int) -> ProbeState:
    if state is ProbeState.TRY_HEAD and status == 405:
        return ProbeState.TRY_GET
    return ProbeState.DONE


def parse_content_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def classify_error(exc: BaseException) -> ProbeError:
    # ServerTimeoutError is also a ClientConnectionError; check timeouts first
    if isinstance(exc, asyncio.TimeoutError):
        return ProbeError.TIMEOUT
    if isinstance(exc, aiohttp.ClientSSLError):
        return ProbeError.TLS
    if isinstance(exc, aiohttp.ClientConnectorDNSError):
        return ProbeError.DNS
    if isinstance(exc, aiohttp.ClientConnectionError):
        return ProbeError.CONNECTION
    return ProbeError.OTHER


def build_session(config: ScanConfig) -> aiohttp.ClientSession:
    """One pooled session per scan; the pool is capped at the concurrency limit."""
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(limit=config.concurrency),
        timeout=aiohttp.ClientTimeout(total=config.timeout_seconds),
        headers={"User-Agent": USER_AGENT},
    )


async def _send(
    session: aiohttp.ClientSession, method: str, url: str, timeout: aiohttp.ClientTimeout
) -> Dict:
    # body is never read; leaving the context releases or closes the connection
    async with session.request(method, url, allow_redirects=False, timeout=timeout) as r:
        return {
            "status": r.status,
            "content_length": r.headers.get("Content-Length"),
            "location": r.headers.get("Location"),
        }


async def probe(session: aiohttp.ClientSession, url: str, config: ScanConfig) -> ProbeOutcome:
    timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)
    state = initial_state(config.force_get)
    resp: Dict = {}
    try:
        while state is not ProbeState.DONE:
            resp = await _send(session, state.value, url, timeout)
            state = next_state(state, resp["status"])
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        kind = classify_error(e)
        log.debug("probe failed: %s [%s] %s", url, kind.value, e)
        return ProbeOutcome(url=url, error=kind, detail=str(e) or type(e).__name__)

    status = resp["status"]
    location = resp["location"] if 300 <= status < 400 else None
    return ProbeOutcome(
        url=url,
        status=status,
        content_length=parse_content_length(resp["content_length"]),
        location=location,
    )
