from typing import Iterable, Iterator, Sequence, Tuple
from urllib.parse import urlsplit

from .errors import InvalidBaseUrl
from .models import normalize_extension


def normalize_base(raw: str) -> str:
    """Validate an http(s) base URL and make sure it ends with '/'."""
    base = (raw or "").strip()
    try:
        parts = urlsplit(base)
    except ValueError:
        raise InvalidBaseUrl(raw) from None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidBaseUrl(raw)
    if not base.endswith("/"):
        base += "/"
    return base


def parse_extensions(raw: str) -> Tuple[str, ...]:
    out = []
    for token in (raw or "").split(","):
        ext = normalize_extension(token)
        if ext and ext not in out:
            out.append(ext)
    return tuple(out)


def _candidates(base: str, words: Iterable[str], extensions: Sequence[str]) -> Iterator[str]:
    for word in words:
        url = base + word.lstrip("/")
        yield url
        for ext in extensions:
            yield url + ext


def generate(base: str, words: Iterable[str], extensions: Sequence[str] = ()) -> Iterator[str]:
    """
    Lazily yield candidate URLs: each word bare, then once per extension.
    The base is checked up front so a bad one fails before anything is yielded.
    """
    if not base.endswith("/"):
        raise InvalidBaseUrl(base)
    normalize_base(base)
    exts = tuple(e for e in (normalize_extension(x) for x in extensions) if e)
    return _candidates(base, words, exts)
