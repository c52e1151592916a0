"""
Command-line entry point.

Usage:
    dirprobe https://example.com/ -w words.txt --exts php,html -c 100 --get
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .errors import ScanSetupError
from .models import DEFAULT_INTERESTING, ScanConfig
from .results import LineSink
from .scanner import scan
from .targets import normalize_base, parse_extensions
from .wordlists import read_wordlist

log = logging.getLogger("dirprobe.cli")


def _status_codes(raw: str) -> List[int]:
    try:
        codes = [int(x) for x in raw.split(",") if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a comma-separated list of status codes: {raw!r}")
    if not codes:
        raise argparse.ArgumentTypeError("at least one status code is required")
    return codes


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="dirprobe", description="Find unlinked files and directories on a web server")
    p.add_argument("base", help="Base URL (http:// or https://)")
    p.add_argument("-w", "--wordlist", required=True, help="Wordlist file, one word per line")
    p.add_argument("-c", "--concurrency", type=int, default=50, help="Max in-flight probes (default 50)")
    p.add_argument("--get", action="store_true", help="Use GET instead of HEAD")
    p.add_argument("--timeout", type=int, default=10, help="Per-request timeout in seconds (default 10)")
    p.add_argument("--exts", default="", help="Comma-separated extensions, e.g. php,html")
    p.add_argument(
        "--status-codes", type=_status_codes, default=sorted(DEFAULT_INTERESTING),
        help="Comma-separated status codes to report (default 200,301,302,401,403)",
    )
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log failed probes")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors on stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _setup_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # aiohttp is chatty at debug level
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    _setup_logging(args)

    try:
        base = normalize_base(args.base)
        config = ScanConfig(
            concurrency=args.concurrency,
            timeout_seconds=args.timeout,
            force_get=args.get,
            extensions=parse_extensions(args.exts),
            interesting_statuses=frozenset(args.status_codes),
        )
        words = read_wordlist(args.wordlist)
    except ScanSetupError as e:
        log.error("%s", e)
        return 1
    except ValidationError as e:
        for err in e.errors():
            log.error("invalid %s: %s", ".".join(str(x) for x in err["loc"]), err["msg"])
        return 1

    if not words:
        log.warning("wordlist %s has no usable entries", args.wordlist)

    try:
        asyncio.run(scan(base, words, config, LineSink(statuses=config.interesting_statuses)))
    except KeyboardInterrupt:
        log.warning("scan interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
