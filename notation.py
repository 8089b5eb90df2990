"""Plain-text score notation for auto-play.

Digits '1'-'7' are scale degrees, a space is a rest lasting one step. Any
other character is ignored and takes no time.
"""
import os
import sys
from typing import Iterator

REST = None # Symbol yielded for a space
NOTE_CHARS = frozenset('1234567')
REST_CHAR = ' '


def iter_notation(text: str) -> Iterator[int | None]:
    """Lazily yields scale degrees (1-7) or REST for each playable symbol."""
    for ch in text.strip():
        if ch in NOTE_CHARS:
            yield int(ch)
        elif ch == REST_CHAR:
            yield REST


def load_notation(path: str) -> str | None:
    """Reads a notation file and returns its trimmed text, or None if unreadable."""
    if not os.path.isfile(path):
        print(f"Error: Notation file not found: '{path}'", file=sys.stderr)
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read().strip()
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading notation file '{path}': {e}", file=sys.stderr)
        return None
    print(f"Loaded notation from '{os.path.basename(path)}' ({len(text)} characters).")
    return text
