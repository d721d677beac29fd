from __future__ import annotations

import html
import logging
import re

LOGGER = logging.getLogger(__name__)

# "Â" left behind when a UTF-8 NBSP (C2 A0) is decoded as latin-1.
MOJIBAKE_MARKER = "\u00c2"

_NBSP_ENTITY_RE = re.compile(r"&nbsp;", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(r"</(?:p|li|div)>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def normalize_html(value) -> str:
    """
    Flatten an HTML fragment from a product export into plain text.

    Line-breaking tags (``<br>``, ``</p>``, ``</li>``, ``</div>``) become
    newlines so embedded ``label: value`` lines survive; every other tag is
    dropped. Entities are decoded last.
    """

    if not value:
        return ""

    text = str(value)
    text = text.replace("\u00a0", " ").replace(MOJIBAKE_MARKER, "")
    text = _NBSP_ENTITY_RE.sub(" ", text)

    text = _BR_RE.sub("\n", text)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)

    text = text.replace("\r", "").strip()

    try:
        text = html.unescape(text)
    except (TypeError, ValueError) as exc:
        LOGGER.debug("Entity decode failed, keeping raw text: %s", exc)
    return text
