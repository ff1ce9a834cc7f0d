from __future__ import annotations

import html
import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def validate_search_input(value: str, max_length: int = 100) -> bool:
    if not value.strip() or len(value) > max_length:
        return False
    if re.search(r"[;\"\\%_]", value) or _CONTROL_CHARS.search(value):
        return False
    return True


def sanitize_html_text(value: str) -> str:
    return html.escape(_CONTROL_CHARS.sub("", value).strip(), quote=True)
