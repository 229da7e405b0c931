# ingest/text_utils.py
from __future__ import annotations
import re
from typing import Optional

# Search-hit highlight markers wrapped around matched terms
_HIGHLIGHT_RE = re.compile(r"<!HS>|<!HE>")
# Heading blocks embedded in article bodies
_HEADING_RE = re.compile(r"<h4[^>]*>.*?</h4>")
_NEWLINES_RE = re.compile(r"\n+")


def _clean_once(text: str) -> str:
    text = _HIGHLIGHT_RE.sub("", text)
    text = _HEADING_RE.sub("", text)
    return _NEWLINES_RE.sub("\n", text)


def clean_text(text: Optional[str]) -> str:
    """
    Strip highlight markers and <h4> blocks, and collapse newline runs.

    Repeats until nothing changes so the result is stable under a second
    call, e.g. "<!HS>뉴스<!HE>\\n\\n\\n내용" -> "뉴스\\n내용". None becomes "".
    """
    if not text:
        return ""
    cleaned = _clean_once(text)
    while cleaned != text:
        text = cleaned
        cleaned = _clean_once(text)
    return cleaned
