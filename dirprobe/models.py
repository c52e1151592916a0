import time
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator, model_validator

from .wordlists import clean_words

DEFAULT_INTERESTING = frozenset({200, 301, 302, 401, 403})


def normalize_extension(raw: str) -> str:
    """'php', '.php' and '..php' all become '.php'; blanks become ''."""
    stripped = raw.strip().lstrip(".")
    return f".{stripped}" if stripped else ""


class ProbeError(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    TLS = "tls"
    DNS = "dns"
    OTHER = "other"


class ScanConfig(BaseModel):
    """Settings shared by every probe of one scan. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    concurrency: int = Field(50, ge=1)
    timeout_seconds: float = Field(10, gt=0)
    force_get: bool = False
    extensions: Tuple[str, ...] = ()
    interesting_statuses: FrozenSet[int] = DEFAULT_INTERESTING

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, v):
        out: List[str] = []
        for raw in v or ():
            ext = normalize_extension(str(raw))
            if ext and ext not in out:
                out.append(ext)
        return tuple(out)


class ProbeOutcome(BaseModel):
    url: str
    status: Optional[int] = None
    content_length: Optional[int] = None
    location: Optional[str] = None
    error: Optional[ProbeError] = None
    detail: Optional[str] = None
    completed_at: float = Field(default_factory=time.time)

    @model_validator(mode="after")
    def _status_xor_error(self):
        if (self.status is None) == (self.error is None):
            raise ValueError("outcome needs exactly one of status or error")
        return self

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_redirect(self) -> bool:
        return self.status is not None and 300 <= self.status < 400


class ScanSummary(BaseModel):
    total: int = 0
    interesting: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0


class ScanRequest(BaseModel):
    url: HttpUrl
    words: List[str] = []
    wordlist: Optional[str] = None  # name under the server wordlist directory
    extensions: List[str] = []
    concurrency: int = Field(50, ge=1)
    timeout_seconds: float = Field(10, gt=0)
    force_get: bool = False
    status_codes: List[int] = sorted(DEFAULT_INTERESTING)

    @field_validator("words")
    @classmethod
    def _clean_words(cls, v):
        return clean_words(v)

    @model_validator(mode="after")
    def _needs_words(self):
        if not self.words and not self.wordlist:
            raise ValueError("either words or wordlist is required")
        return self

    def to_config(self) -> ScanConfig:
        return ScanConfig(
            concurrency=self.concurrency,
            timeout_seconds=self.timeout_seconds,
            force_get=self.force_get,
            extensions=self.extensions,
            interesting_statuses=frozenset(self.status_codes),
        )
