"""
文本处理服务 - HTML清理和字数统计
Plaintext is derived from stored HTML by tag stripping only.
"""
import re

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(html: str) -> str:
    """Replace tags with spaces, collapse whitespace runs and trim."""
    text = _TAG_RE.sub(" ", html or "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def count_words(text: str) -> int:
    """Count whitespace-separated words, stripping HTML first if present."""
    if not text:
        return 0
    if "<" in text:
        text = strip_html(text)
    return len(text.split())
