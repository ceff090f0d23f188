"""Strip prompt-injection phrasings from retrieved document text.

Defense in depth only: this removes known phrasings, it does not make
arbitrary document content safe to follow as instructions.
"""

import re
from typing import Pattern, Sequence

INJECTION_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"ignore\s+(?:all\s+|any\s+)?previous\s+instructions", re.IGNORECASE),
    re.compile(r"\bact\s+as\b", re.IGNORECASE),
    re.compile(r"\bsystem\s+prompt\b", re.IGNORECASE),
    re.compile(r"\bconfidential\b", re.IGNORECASE),
)


def sanitize_context(text: str, patterns: Sequence[Pattern[str]] = INJECTION_PATTERNS) -> str:
    if not text:
        return ""
    for pattern in patterns:
        text = pattern.sub("", text)
    return text
