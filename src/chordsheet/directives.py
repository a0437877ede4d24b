"""Directive scanning for ChordPro source lines.

A directive occupies a whole line::

    {title: Amazing Grace}
    {start_of_chorus}
    {start_of_verse: Verse 1}
    {end_of_verse}

The check is made on the raw line: it must start with ``{`` and end with ``}``.
Leading or trailing whitespace therefore disqualifies a line.  Keys are
matched case-insensitively (``{TITLE: X}`` == ``{title: X}``).

Each directive is classified into one of the :class:`DirectiveKind` variants
before the section assembler acts on it.
"""

from dataclasses import dataclass
from enum import Enum, auto

SECTION_START_PREFIX = "start_of_"
SECTION_END_PREFIX = "end_of_"


# ---------------------------------------------------------------------------
# DirectiveKind
# ---------------------------------------------------------------------------


class DirectiveKind(Enum):
    METADATA = auto()  # {title: ...}, {key: ...}, {subtitle: ...}, anything else
    SECTION_START = auto()  # {start_of_<name>} / {start_of_<name>: Label}
    SECTION_END = auto()  # {end_of_<name>}
    UNKNOWN = auto()  # {} or {: value}, nothing to key it on


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    key: str  # lower-cased, stripped
    value: str  # stripped; "" when the directive has no colon
    name: str = ""  # section name for SECTION_START / SECTION_END


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def is_directive_line(line: str) -> bool:
    return line.startswith("{") and line.endswith("}")


def is_malformed_directive(line: str) -> bool:
    """Return True for a line that opens a directive but never closes it."""
    return line.startswith("{") and not line.endswith("}")


def classify_key(key: str) -> tuple[DirectiveKind, str]:
    """Return ``(kind, section_name)`` for an already lower-cased *key*."""
    if not key:
        return DirectiveKind.UNKNOWN, ""
    if key.startswith(SECTION_START_PREFIX):
        return DirectiveKind.SECTION_START, key[len(SECTION_START_PREFIX):]
    if key.startswith(SECTION_END_PREFIX):
        return DirectiveKind.SECTION_END, key[len(SECTION_END_PREFIX):]
    return DirectiveKind.METADATA, ""


def scan_directive(line: str) -> Directive | None:
    """Parse *line* as a directive, or return None if it is not one.

    The interior is split on the first ``:`` only, so
    ``{title: Song: A Subtitle}`` keeps ``Song: A Subtitle`` as the value.
    """
    if not is_directive_line(line):
        return None

    key, _, value = line[1:-1].partition(":")
    key = key.strip().lower()
    kind, name = classify_key(key)
    return Directive(kind=kind, key=key, value=value.strip(), name=name)


def section_label(name: str, value: str) -> str:
    """Label for a ``start_of_<name>`` directive: its value, else ``<Name>``."""
    if value:
        return value
    return name[:1].upper() + name[1:]
