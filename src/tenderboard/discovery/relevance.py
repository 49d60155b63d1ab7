"""Relevance filter - skip links that are never tender documents"""
from typing import Iterable, List

# Substrings that mark social, map and video links. Checked against the
# lowercased URL, so "maps." catches maps.google.com and friends.
DENY_SUBSTRINGS = (
    'google.com',
    'facebook',
    'twitter',
    'linkedin',
    'maps.',
    'youtube',
)


def is_relevant_link(url: str) -> bool:
    """Return False for mail links and known non-document domains."""
    lower = url.lower()
    if lower.startswith('mailto:'):
        return False
    return not any(s in lower for s in DENY_SUBSTRINGS)


def unique_relevant_links(links: Iterable[str]) -> List[str]:
    """Dedupe (first occurrence wins) then drop irrelevant links."""
    return [url for url in dict.fromkeys(links) if is_relevant_link(url)]
