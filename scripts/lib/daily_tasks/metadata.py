"""Trailing metadata tokens on task lines.

A task line may carry ``key:value`` tokens for identity and dates::

    - [ ] Buy milk id:k3f cd:2026-02-21 due:2026-02-25 dd:2026-02-22

``decode`` strips every recognised token out of the free text and
``encode`` renders them back as a suffix in fixed order.
"""

import re

META_KEYS = ('id', 'cd', 'due', 'dd')

# Whitespace-bounded so "paid:yes" or "url://x" style text is left alone.
META_TOKEN_RE = re.compile(r'(?<!\S)(id|cd|due|dd):(\S+)(?!\S)', re.IGNORECASE)
_MULTI_WS_RE = re.compile(r'\s+')


def decode(text: str) -> tuple[str, dict]:
    """Split task text into (cleaned_text, metadata).

    Keys are matched case-insensitively and returned lowercased. When a key
    appears more than once the last value wins; all copies are removed.
    """
    meta = {}
    for match in META_TOKEN_RE.finditer(text):
        meta[match.group(1).lower()] = match.group(2)

    cleaned = META_TOKEN_RE.sub('', text)
    cleaned = _MULTI_WS_RE.sub(' ', cleaned).strip()
    return cleaned, meta


def encode(meta: dict) -> str:
    """Render present metadata fields as a space-prefixed suffix."""
    parts = [f"{key}:{meta[key]}" for key in META_KEYS if meta.get(key)]
    return f" {' '.join(parts)}" if parts else ''


def find_ids(content: str) -> set[str]:
    """Return every ``id:`` value in content, lowercased."""
    return {
        match.group(2).lower()
        for match in META_TOKEN_RE.finditer(content)
        if match.group(1).lower() == 'id'
    }
