import logging
import sys
from typing import Awaitable, Callable, Collection, Optional, TextIO

from .models import DEFAULT_INTERESTING, ProbeOutcome

log = logging.getLogger("dirprobe.results")

Sink = Callable[[ProbeOutcome], Awaitable[None]]


def is_interesting(outcome: ProbeOutcome, statuses: Collection[int] = DEFAULT_INTERESTING) -> bool:
    return not outcome.failed and outcome.status in statuses


def format_record(outcome: ProbeOutcome) -> str:
    length = "-" if outcome.content_length is None else str(outcome.content_length)
    line = f"[{int(outcome.completed_at)}] {outcome.status:>3} len={length}  {outcome.url}"
    if outcome.is_redirect and outcome.location:
        line += f" -> {outcome.location}"
    return line


class LineSink:
    """Prints one record per interesting outcome; failures only go to the debug log."""

    def __init__(self, stream: Optional[TextIO] = None, statuses: Collection[int] = DEFAULT_INTERESTING):
        self.stream = stream
        self.statuses = frozenset(statuses)

    def accept(self, outcome: ProbeOutcome) -> bool:
        return is_interesting(outcome, self.statuses)

    async def __call__(self, outcome: ProbeOutcome) -> None:
        if outcome.failed:
            log.debug("skipped %s (%s)", outcome.url, outcome.error.value)
            return
        if self.accept(outcome):
            print(format_record(outcome), file=self.stream or sys.stdout, flush=True)
