"""Text cleanup for fetched web pages and extracted document text."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Set

CONTROL_CHAR_PATTERN = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")
MULTISPACE_PATTERN = re.compile(r"\s+")

# A line seen this many times, and no longer than this many words, is a running header or footer
REPEAT_THRESHOLD = 5
MAX_BOILERPLATE_WORDS = 12


def repeated_lines(lines: Iterable[str]) -> Set[str]:
    """Return the short stripped lines that occur at least ``REPEAT_THRESHOLD`` times."""

    counts = Counter(stripped for stripped in (line.strip() for line in lines) if stripped)
    return {
        line
        for line, count in counts.items()
        if count >= REPEAT_THRESHOLD and len(line.split()) <= MAX_BOILERPLATE_WORDS
    }


def clean_text(text: str, strip_repeated_lines: bool = False) -> str:
    """Collapse ``text`` to single-spaced plain text.

    Control characters and non-breaking spaces become spaces. With
    ``strip_repeated_lines`` (used for PDFs) page headers and footers such as
    "Minnesota Department of Human Services" are dropped first.
    """

    text = CONTROL_CHAR_PATTERN.sub(" ", text).replace("\u00A0", " ")
    if strip_repeated_lines:
        lines = text.splitlines()
        boilerplate = repeated_lines(lines)
        if boilerplate:
            text = "\n".join(line for line in lines if line.strip() not in boilerplate)
    return MULTISPACE_PATTERN.sub(" ", text).strip()
