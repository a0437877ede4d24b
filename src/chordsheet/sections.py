"""Grouping of rendered lines into song sections.

The assembler is a two-state machine (no section open / section open) fed one
source line at a time:

  * ``{start_of_X}``        opens a section of type ``X``
  * ``{end_of_X}``          closes whatever section is open, whatever ``X`` is
  * content line            goes to the open section, else to a trailing
                            implicit ``verse`` section
  * blank line              becomes an empty-line fragment inside an open
                            section, and is dropped otherwise
  * end of input            flushes a section that was never closed

A :class:`SectionAssembler` is the whole parsing context for one document,
including the directive store, so nothing carries over between documents.
"""

import logging
from collections.abc import Callable, Iterable

from .directives import Directive, DirectiveKind, is_malformed_directive, scan_directive, section_label
from .interleave import EMPTY_LINE, render_chord_line
from .models import Section

logger = logging.getLogger(__name__)

IMPLICIT_SECTION_TYPE = "verse"


class SectionAssembler:
    """Accumulates sections and directives for a single document."""

    def __init__(self, render_line: Callable[[str], str] = render_chord_line):
        self.render_line = render_line
        self.sections: list[Section] = []
        self.current: Section | None = None
        self.directives: dict[str, str] = {}
        self._lineno = 0

    def feed(self, line: str) -> None:
        """Consume one source line (without its trailing newline)."""
        self._lineno += 1

        directive = scan_directive(line)
        if directive is not None:
            self._apply_directive(directive)
            return

        if is_malformed_directive(line):
            logger.debug("line %d: dropping unterminated directive %r", self._lineno, line)
            return

        if not line.strip():
            if self.current is not None:
                self.current.lines.append(EMPTY_LINE)
            return

        fragment = self.render_line(line)
        if self.current is not None:
            self.current.lines.append(fragment)
            return

        if not self.sections or self.sections[-1].type != IMPLICIT_SECTION_TYPE:
            self.sections.append(Section(type=IMPLICIT_SECTION_TYPE))
        self.sections[-1].lines.append(fragment)

    def finish(self) -> list[Section]:
        """Flush any open section and return the assembled sections."""
        if self.current is not None:
            logger.debug("flushing unterminated %r section at end of input", self.current.type)
            self._close()
        return self.sections

    # -- internals ---------------------------------------------------------

    def _apply_directive(self, directive: Directive) -> None:
        if directive.kind is DirectiveKind.UNKNOWN:
            logger.debug("line %d: ignoring directive with empty key", self._lineno)
            return

        self.directives[directive.key] = directive.value

        if directive.kind is DirectiveKind.SECTION_START:
            if self.current is not None:
                # Sections do not nest; the open one ends where the next begins.
                logger.debug(
                    "line %d: %r opened while %r still open, closing it",
                    self._lineno,
                    directive.name,
                    self.current.type,
                )
                self._close()
            self.current = Section(
                type=directive.name,
                label=section_label(directive.name, directive.value),
            )
        elif directive.kind is DirectiveKind.SECTION_END:
            if self.current is None:
                logger.debug("line %d: %r with no open section", self._lineno, directive.key)
                return
            self._close()

    def _close(self) -> None:
        self.sections.append(self.current)
        self.current = None


def assemble(
    lines: Iterable[str], render_line: Callable[[str], str] = render_chord_line
) -> SectionAssembler:
    """Feed every line of a document through a fresh assembler and finish it."""
    assembler = SectionAssembler(render_line)
    for line in lines:
        assembler.feed(line)
    assembler.finish()
    return assembler
