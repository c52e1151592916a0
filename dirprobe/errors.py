class ScanSetupError(Exception):
    """Raised before any probing starts; aborts the whole run."""


class InvalidBaseUrl(ScanSetupError):
    def __init__(self, base: str):
        super().__init__(f"base must be an http:// or https:// URL with a host: {base!r}")
        self.base = base


class WordlistError(ScanSetupError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read wordlist {path}: {reason}")
        self.path = path
