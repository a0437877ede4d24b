"""Helpers around the parser for editors and the command line.

  1. load_source()       read a ChordPro file (or stdin) as text
  2. normalize_source()  canonical line endings, whitespace and directive form
  3. extract_metadata()  directive metadata with aliases and numeric fields
  4. chord_progression() unique chords in order of first appearance
  5. section_summaries() section names with the chords each one uses
  6. lint_source()       non-fatal diagnostics with line numbers

None of these change what :func:`chordsheet.renderer.parse` produces; parsing
stays lenient and never fails.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .directives import DirectiveKind, is_malformed_directive, scan_directive, section_label
from .exceptions import SourceError
from .interleave import extract_chords

logger = logging.getLogger(__name__)

# Bracketed section headers that show up in pasted tabs: [Verse 1], [Chorus]
SECTION_MARKER_RE = re.compile(
    r"^(?:Verse|Chorus|Bridge|Intro|Outro|Solo|Interlude|Instrumental|"
    r"Pre-?Chorus|Tag|Coda|Refrain|Hook)(?:\s+\d+)?$",
    re.IGNORECASE,
)

# A whole line holding one bracketed label: [Verse 1], [Chorus], [Empty Section]
BRACKETED_LABEL_RE = re.compile(r"^\[([^\]]+)\]$")

# Short directive names accepted by extract_metadata().
_METADATA_ALIASES = {
    "t": "title",
    "st": "subtitle",
}

# Metadata reported as integers; non-numeric values are dropped.
_INTEGER_METADATA = {"tempo", "capo", "year"}

IMPLICIT_SECTION_NAME = "Verse"


# ---------------------------------------------------------------------------
# Loading and normalization
# ---------------------------------------------------------------------------


def load_source(path: str) -> str:
    """Return the text of *path*, or of stdin when *path* is ``-``.

    Line endings are converted to ``\\n``.  Raises SourceError if the file
    cannot be read or is not valid UTF-8.
    """
    try:
        if path == "-":
            text = sys.stdin.read()
        else:
            text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceError(path, "not valid UTF-8 text") from exc
    except OSError as exc:
        raise SourceError(path, exc.strerror or str(exc)) from exc
    return _unify_newlines(text)


def normalize_source(text: str) -> str:
    """Return *text* with tidy lines and canonical ``{key: value}`` directives.

    Example::

        "{TITLE:Amazing Grace}\\r\\n  [G]Amazing  \\r\\n\\r\\n"
        -> "{title: Amazing Grace}\\n[G]Amazing"
    """
    lines = []
    for line in _unify_newlines(text).split("\n"):
        line = line.strip()
        directive = scan_directive(line)
        if directive is not None and directive.kind is not DirectiveKind.UNKNOWN:
            line = f"{{{directive.key}: {directive.value}}}" if directive.value else f"{{{directive.key}}}"
        lines.append(line)

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def _unify_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def extract_metadata(text: str) -> dict[str, str | int]:
    """Return the metadata directives of *text* keyed by lower-cased name.

    ``{t: ...}`` and ``{st: ...}`` count as ``title`` and ``subtitle``.
    ``tempo``, ``capo`` and ``year`` are returned as ints; a value that is
    not a whole number is dropped, as is any directive with an empty value.
    Section directives are not metadata and are skipped.
    """
    metadata: dict[str, str | int] = {}
    for line in _unify_newlines(text).split("\n"):
        directive = scan_directive(line.strip())
        if directive is None or directive.kind is not DirectiveKind.METADATA or not directive.value:
            continue

        key = _METADATA_ALIASES.get(directive.key, directive.key)
        value: str | int = directive.value
        if key in _INTEGER_METADATA:
            try:
                value = int(directive.value)
            except ValueError:
                logger.debug("dropping non-numeric %s %r", key, directive.value)
                continue
        metadata[key] = value
    return metadata


# ---------------------------------------------------------------------------
# Chord progression
# ---------------------------------------------------------------------------


def chord_progression(text: str) -> list[str]:
    """Return the distinct chords of *text* in order of first appearance.

    Directive lines and bracketed section headers (``[Verse 1]``) are skipped.
    """
    seen: dict[str, None] = {}
    for line in _unify_newlines(text).split("\n"):
        if scan_directive(line) is not None or is_malformed_directive(line):
            continue
        if _section_marker(line) is not None:
            continue
        _, positions = extract_chords(line)
        for pos in positions:
            chord = pos.chord.strip()
            if chord and not SECTION_MARKER_RE.match(chord):
                seen.setdefault(chord, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Section summaries
# ---------------------------------------------------------------------------


@dataclass
class SectionSummary:
    """A section's display name and the distinct chords played in it."""

    name: str  # e.g. "Verse 1", "Chorus"
    chords: list[str] = field(default_factory=list)


def section_summaries(text: str) -> list[SectionSummary]:
    """Return one :class:`SectionSummary` per section of *text*, in order.

    Sections start at ``{start_of_<name>}`` directives or at bracketed header
    lines (``[Verse 1]``, ``[Chorus]``).  Content before any header, or after
    an ``{end_of_<name>}``, is collected under an implicit ``Verse``.  A
    header with no chords under it still yields a summary, with ``chords == []``.
    """
    summaries: list[SectionSummary] = []
    current: SectionSummary | None = None

    for line in _unify_newlines(text).split("\n"):
        directive = scan_directive(line)
        if directive is not None:
            if directive.kind is DirectiveKind.SECTION_START:
                current = SectionSummary(name=section_label(directive.name, directive.value))
                summaries.append(current)
            elif directive.kind is DirectiveKind.SECTION_END:
                current = None
            continue

        if is_malformed_directive(line) or not line.strip():
            continue

        name = _section_marker(line)
        if name is not None:
            current = SectionSummary(name=name)
            summaries.append(current)
            continue

        if current is None:
            current = SectionSummary(name=IMPLICIT_SECTION_NAME)
            summaries.append(current)

        _, positions = extract_chords(line)
        for pos in positions:
            chord = pos.chord.strip()
            if chord and chord not in current.chords:
                current.chords.append(chord)

    return summaries


def _section_marker(line: str) -> str | None:
    """Return the label of a bracketed header line, or None.

    A lone ``[G]`` is a chord; a lone bracket is a header only when it names a
    known section (``[Verse]``) or holds more than one word (``[Empty Section]``).
    """
    m = BRACKETED_LABEL_RE.match(line.strip())
    if not m:
        return None
    label = m.group(1).strip()
    if SECTION_MARKER_RE.match(label) or len(label.split()) > 1:
        return label
    return None


# ---------------------------------------------------------------------------
# Linting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LintIssue:
    line: int  # 1-based
    message: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


def lint_source(text: str) -> list[LintIssue]:
    """Report constructs the parser silently tolerates.

    Checks for unterminated or empty-named directives, unmatched chord
    brackets, section directives that do not pair up, and sections still open
    at end of input.
    """
    issues: list[LintIssue] = []
    open_section: tuple[int, str] | None = None  # (line number, section name)

    for lineno, line in enumerate(_unify_newlines(text).split("\n"), start=1):
        if is_malformed_directive(line):
            issues.append(LintIssue(lineno, "malformed directive (missing closing '}')"))
            continue

        directive = scan_directive(line)
        if directive is None:
            issues.extend(LintIssue(lineno, msg) for msg in _bracket_problems(line))
            continue

        if directive.kind is DirectiveKind.UNKNOWN:
            issues.append(LintIssue(lineno, "malformed directive (empty name)"))
        elif directive.kind is DirectiveKind.SECTION_START:
            if open_section is not None:
                issues.append(
                    LintIssue(lineno, f"{directive.key} while '{open_section[1]}' section is still open")
                )
            open_section = (lineno, directive.name)
        elif directive.kind is DirectiveKind.SECTION_END:
            if open_section is None:
                issues.append(LintIssue(lineno, f"{directive.key} with no open section"))
            open_section = None

    if open_section is not None:
        issues.append(LintIssue(open_section[0], f"unterminated section '{open_section[1]}'"))

    return issues


def _bracket_problems(line: str) -> list[str]:
    problems = []
    i = 0
    while i < len(line):
        char = line[i]
        if char == "[":
            close = line.find("]", i)
            if close == -1:
                problems.append(f"unmatched '[' at column {i + 1}")
                break
            i = close + 1
            continue
        if char == "]":
            problems.append(f"unmatched ']' at column {i + 1}")
        i += 1
    return problems
