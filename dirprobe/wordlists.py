import os
from pathlib import Path
from typing import Iterable, List, Union

from .errors import WordlistError

BASE = Path(__file__).resolve().parent.parent
WORDLIST_DIR = Path(os.environ.get("DIRPROBE_WORDLIST_DIR", BASE / "wordlists"))


def clean_words(lines: Iterable[str], comment: str = "#") -> List[str]:
    """Trim every entry and drop blanks and comments, keeping order."""
    words: List[str] = []
    for line in lines:
        s = line.strip()
        if not s or (comment and s.startswith(comment)):
            continue
        words.append(s)
    return words


def read_wordlist(path: Union[str, Path], comment: str = "#") -> List[str]:
    """
    Read one word per line, in file order.
    GUARANTEES: entries are trimmed, never blank, never comments.
    """
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8", errors="ignore") as f:
            return clean_words(f, comment)
    except OSError as e:
        raise WordlistError(str(p), e.strerror or str(e)) from e


def resolve_wordlist(name: str, root: Union[str, Path, None] = None) -> Path:
    """Map a wordlist name to a file that must sit inside `root`."""
    base = Path(root if root is not None else WORDLIST_DIR).resolve()
    target = (base / name).resolve()
    if not target.is_relative_to(base) or target == base:
        raise WordlistError(name, f"not inside the wordlist directory {base}")
    return target
