from dataclasses import dataclass, field


@dataclass
class ChordPosition:
    """A chord anchored to a character of the chord-stripped lyric.

    ``char_index`` counts characters of the lyric with every ``[chord]`` token
    removed, so ``encyclo[D]pedia`` yields ``ChordPosition("D", 7)``.  It may
    equal the lyric length when the chord closes the line.
    """

    chord: str
    char_index: int


@dataclass
class Section:
    """A run of rendered lines grouped under one section directive.

    ``lines`` holds markup fragments produced by the interleaver, not source text.
    """

    type: str  # e.g. "verse", "chorus", "bridge"; implicit groups are "verse"
    label: str | None = None  # "Verse 1", "Chorus"; None for implicit verses
    lines: list[str] = field(default_factory=list)


@dataclass
class Song:
    """Result of parsing one ChordPro document."""

    title: str | None = None
    artist: str | None = None
    key: str | None = None
    tempo: str | None = None
    capo: str | None = None
    sections: list[Section] = field(default_factory=list)
    directives: dict[str, str] = field(default_factory=dict)  # every directive seen, lower-cased keys
