"""Chord/lyric interleaving for a single content line.

The chord in ``encyclo[D]pedia`` belongs to the character right after the
bracket, not to the word.  The line is first split into a chord-free lyric and
a list of :class:`~chordsheet.models.ChordPosition` offsets into that lyric,
then rendered so each chord wraps exactly one lyric character::

    encyclo<span class="chord-anchor" data-chord="D">p</span>edia

Lines whose lyric is blank (``[G][D/G][G][D/G]``) are intros or fills and are
rendered as one row of inline chords instead.

Nothing is escaped in raw mode: lyric text and chord symbols pass through
byte-for-byte, matching what the downstream chord-sheet styles expect.
"""

from collections.abc import Callable
from html import escape

from .models import ChordPosition

EMPTY_LINE = '<div class="chord-line-container"></div>'

CHORD_SEPARATOR = "  "


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_chords(line: str) -> tuple[str, list[ChordPosition]]:
    """Return ``(clean_line, positions)`` for a content line.

    A ``[`` with no ``]`` anywhere after it is kept as literal text.
    """
    positions: list[ChordPosition] = []
    clean: list[str] = []
    length = 0

    i = 0
    while i < len(line):
        if line[i] == "[":
            close = line.find("]", i)
            if close != -1:
                positions.append(ChordPosition(chord=line[i + 1:close], char_index=length))
                i = close + 1
                continue
        clean.append(line[i])
        length += 1
        i += 1

    return "".join(clean), positions


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_chord_line(line: str, raw: bool = True) -> str:
    """Render one content line to a ``chord-line-container`` fragment.

    Args:
        line: A non-blank, non-directive source line.
        raw:  When False, lyric text and chord symbols are HTML-escaped.
    """
    clean, positions = extract_chords(line)
    text = _identity if raw else _escape

    if not positions:
        return f'<div class="chord-line-container">{text(clean)}</div>'

    if not clean.strip():
        return _render_chord_only(positions, text)

    return _render_anchored(clean, positions, text)


def _render_chord_only(positions: list[ChordPosition], text: Callable[[str], str]) -> str:
    chords = CHORD_SEPARATOR.join(
        f'<span class="inline-chord">{text(pos.chord)}</span>' for pos in positions
    )
    return f'<div class="chord-line-container"><span class="chord-only-line">{chords}</span></div>'


def _render_anchored(clean: str, positions: list[ChordPosition], text: Callable[[str], str]) -> str:
    parts = ['<div class="chord-line-container"><span class="lyric-with-chords">']
    cut = 0

    for pos in positions:
        if pos.char_index > cut:
            parts.append(text(clean[cut:pos.char_index]))
        # Stacked chords ([G][D]word) share an index and each wraps the same character.
        anchored = clean[pos.char_index:pos.char_index + 1]
        parts.append(
            f'<span class="chord-anchor" data-chord="{text(pos.chord)}">{text(anchored)}</span>'
        )
        cut = pos.char_index + 1

    if cut < len(clean):
        parts.append(text(clean[cut:]))

    parts.append("</span></div>")
    return "".join(parts)


def _identity(value: str) -> str:
    return value


def _escape(value: str) -> str:
    return escape(value, quote=True)
