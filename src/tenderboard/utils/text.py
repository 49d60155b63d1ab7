"""Text normalisation for keyword matching and filenames"""
import re
import unicodedata
from typing import Iterable

# Combining diacritical marks block (U+0300 - U+036F)
_COMBINING_MARKS = re.compile('[\u0300-\u036f]')


def normalize_text(text: str) -> str:
    """
    Lowercase and strip diacritics so keywords match regardless of accents.

    normalize_text("Técnico") == normalize_text("tecnico") == "tecnico"
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize('NFD', text.lower())
    return _COMBINING_MARKS.sub('', decomposed)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """True if any keyword is a substring of text."""
    return any(kw in text for kw in keywords)


def sanitize_filename(name: str) -> str:
    """
    Make a server-suggested filename safe to write to disk.

    - Drop any directory components
    - Replace characters that are invalid on common filesystems
    - Collapse whitespace
    - Truncate to 200 chars, keeping the extension
    """
    if not name:
        return ""

    # Keep only the last path component
    result = re.split(r'[\\/]', name.strip())[-1]

    # Replace characters invalid on Windows/macOS/Linux
    result = re.sub(r'[<>:"|?*\x00-\x1f]', '_', result)

    # Collapse whitespace
    result = re.sub(r'\s+', ' ', result).strip(' .')

    if len(result) > 200:
        stem, dot, ext = result.rpartition('.')
        if dot and len(ext) <= 10:
            result = stem[:200 - len(ext) - 1] + '.' + ext
        else:
            result = result[:200]

    return result
