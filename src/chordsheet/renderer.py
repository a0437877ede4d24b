"""ChordPro → chord-sheet HTML.

Parses ChordPro text into a :class:`~chordsheet.models.Song` and renders that
model to the markup consumed by the chord-sheet stylesheet.

Markup contract
---------------

+-----------------------------+---------------------------------------------+
| Element                     | Markup                                      |
+=============================+=============================================+
| Header (title or artist)    | ``<div class="chord-sheet-header">``        |
| Title                       | ``<h1 class="song-title">``                 |
| Artist                      | ``<p class="song-artist">``                 |
| Key / Tempo / Capo row      | ``<div class="song-metadata">`` of          |
|                             | ``metadata-item`` / ``metadata-label``      |
+-----------------------------+---------------------------------------------+
| Body (always present)       | ``<div class="chord-sheet-content">``       |
| Section                     | ``<div class="paragraph <type>">``          |
| Section label (not verses)  | ``<div class="paragraph-label               |
|                             | section-label">``                           |
+-----------------------------+---------------------------------------------+

Usage::

    from chordsheet.renderer import ChordSheetRenderer
    renderer = ChordSheetRenderer()
    song = renderer.parse(text)
    html = renderer.render(song)

Raw mode (the default) interpolates every value as-is.  Callers that need the
output to be safe against markup in lyrics or metadata must pass
``raw=False``.
"""

from functools import partial
from html import escape

from .interleave import render_chord_line
from .models import Section, Song
from .sections import assemble

# Metadata row order and labels.
_METADATA_FIELDS = (
    ("key", "Key"),
    ("tempo", "Tempo"),
    ("capo", "Capo"),
)


class ChordSheetRenderer:
    """Parse ChordPro text and render chord sheets."""

    def __init__(self, raw: bool = True):
        self.raw = raw

    def parse(self, content: str) -> Song:
        """Return the :class:`Song` model for *content*.

        Every call gets its own directive store, so metadata from an earlier
        document never shows up in a later one.
        """
        render_line = partial(render_chord_line, raw=self.raw)
        assembler = assemble(content.split("\n"), render_line)
        directives = assembler.directives

        return Song(
            title=directives.get("title"),
            artist=directives.get("artist"),
            key=directives.get("key"),
            tempo=directives.get("tempo"),
            capo=directives.get("capo"),
            sections=assembler.sections,
            directives=dict(directives),
        )

    def render(self, song: Song) -> str:
        """Return chord-sheet HTML for *song*. The model is not modified."""
        parts: list[str] = []

        if song.title or song.artist:
            parts.extend(self._render_header(song))

        parts.append('<div class="chord-sheet-content">')
        for section in song.sections:
            parts.extend(self._render_section(section))
        parts.append("</div>")

        return "".join(parts)

    def parse_and_render(self, content: str) -> str:
        return self.render(self.parse(content))

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _text(self, value: str) -> str:
        return value if self.raw else escape(value, quote=True)

    def _render_header(self, song: Song) -> list[str]:
        parts = ['<div class="chord-sheet-header">']

        if song.title:
            parts.append(f'<h1 class="song-title">{self._text(song.title)}</h1>')
        if song.artist:
            parts.append(f'<p class="song-artist">{self._text(song.artist)}</p>')

        present = [(label, getattr(song, attr)) for attr, label in _METADATA_FIELDS if getattr(song, attr)]
        if present:
            parts.append('<div class="song-metadata">')
            for label, value in present:
                parts.append(
                    f'<span class="metadata-item"><span class="metadata-label">{label}:</span> '
                    f"{self._text(value)}</span>"
                )
            parts.append("</div>")

        parts.append("</div>")
        return parts

    def _render_section(self, section: Section) -> list[str]:
        parts = [f'<div class="paragraph {self._text(section.type)}">']
        # Verse labels ("Verse 1") are never shown.
        if section.label and section.type != "verse":
            parts.append(f'<div class="paragraph-label section-label">{self._text(section.label)}</div>')
        parts.extend(section.lines)
        parts.append("</div>")
        return parts


# ---------------------------------------------------------------------------
# Module-level shortcuts (raw mode)
# ---------------------------------------------------------------------------

_default = ChordSheetRenderer()


def parse(content: str) -> Song:
    return _default.parse(content)


def render(song: Song) -> str:
    return _default.render(song)


def parse_and_render(content: str) -> str:
    return _default.parse_and_render(content)
