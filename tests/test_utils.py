import io

import pytest

from chordsheet.exceptions import SourceError
from chordsheet.utils import (
    LintIssue,
    SectionSummary,
    chord_progression,
    extract_metadata,
    lint_source,
    load_source,
    normalize_source,
    section_summaries,
)

# ---------------------------------------------------------------------------
# load_source
# ---------------------------------------------------------------------------


def test_load_source_normalizes_newlines(tmp_path):
    path = tmp_path / "song.cho"
    path.write_bytes(b"{title: X}\r\n[G]one\rtwo\n")
    assert load_source(str(path)) == "{title: X}\n[G]one\ntwo\n"


def test_load_source_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("[G]from stdin"))
    assert load_source("-") == "[G]from stdin"


def test_load_source_missing_file(tmp_path):
    with pytest.raises(SourceError) as exc_info:
        load_source(str(tmp_path / "missing.cho"))
    assert "missing.cho" in str(exc_info.value)


def test_load_source_not_utf8(tmp_path):
    path = tmp_path / "latin1.cho"
    path.write_bytes("Caf\xe9".encode("latin-1"))
    with pytest.raises(SourceError) as exc_info:
        load_source(str(path))
    assert exc_info.value.reason == "not valid UTF-8 text"


# ---------------------------------------------------------------------------
# normalize_source
# ---------------------------------------------------------------------------


def test_normalize_line_endings():
    normalized = normalize_source("Line 1\r\nLine 2\rLine 3\nLine 4")
    assert normalized.split("\n") == ["Line 1", "Line 2", "Line 3", "Line 4"]


def test_normalize_trims_lines():
    normalized = normalize_source("  Line with leading spaces  \n\t\tTabbed line\t\t\n   ")
    assert normalized == "Line with leading spaces\nTabbed line"


def test_normalize_drops_outer_blank_lines():
    normalized = normalize_source("\n\n{title: Test}\n[G]Chord line\n\n\n")
    assert normalized == "{title: Test}\n[G]Chord line"


def test_normalize_keeps_inner_blank_lines():
    assert normalize_source("a\n\nb") == "a\n\nb"


def test_normalize_directives():
    normalized = normalize_source("{TITLE:Amazing Grace}\n{  artist : John Newton  }\n{key:G}\n{ tempo : 90 }")
    assert normalized == "{title: Amazing Grace}\n{artist: John Newton}\n{key: G}\n{tempo: 90}"


def test_normalize_valueless_directive():
    assert normalize_source("{Start_Of_Chorus}") == "{start_of_chorus}"


def test_normalize_preserves_chord_lines():
    text = "[G]Amazing [C]grace how [D]sweet\nThe [G]sound that [D]saved a [G]wretch"
    assert normalize_source(text) == text


# ---------------------------------------------------------------------------
# extract_metadata
# ---------------------------------------------------------------------------


def test_metadata_basic_directives():
    text = "{title: Amazing Grace}\n{artist: John Newton}\n{key: G}\n{tempo: 90}\n{time: 3/4}\n{capo: 2}"
    assert extract_metadata(text) == {
        "title": "Amazing Grace",
        "artist": "John Newton",
        "key": "G",
        "tempo": 90,
        "time": "3/4",
        "capo": 2,
    }


def test_metadata_short_aliases():
    text = "{t: Amazing Grace}\n{subtitle: How Sweet the Sound}\n{st: Hymn}\n{composer: John Newton}"
    metadata = extract_metadata(text)
    assert metadata["title"] == "Amazing Grace"
    assert metadata["subtitle"] == "Hymn"
    assert metadata["composer"] == "John Newton"


def test_metadata_keys_are_case_insensitive():
    metadata = extract_metadata("{TITLE: Test Song}\n{Artist: Test Artist}\n{KEY: C}\n{Tempo: 120}")
    assert metadata == {"title": "Test Song", "artist": "Test Artist", "key": "C", "tempo": 120}


def test_metadata_drops_bad_numbers_and_empty_values():
    metadata = extract_metadata("{title: Test Song}\n{tempo: not-a-number}\n{invalid directive format\n{key:}")
    assert metadata == {"title": "Test Song"}


def test_metadata_custom_fields():
    text = "{album: Test Album}\n{year: 2023}\n{genre: Contemporary}\n{copyright: © 2023 Test Publisher}"
    metadata = extract_metadata(text)
    assert metadata["album"] == "Test Album"
    assert metadata["year"] == 2023
    assert metadata["genre"] == "Contemporary"
    assert metadata["copyright"] == "© 2023 Test Publisher"


def test_metadata_skips_section_directives():
    assert extract_metadata("{start_of_chorus: Refrain}\n[G]la\n{end_of_chorus}") == {}


# ---------------------------------------------------------------------------
# chord_progression
# ---------------------------------------------------------------------------


def test_unique_chords_in_order():
    text = "[G]Amazing [C]grace how [D]sweet the [G]sound\nThat [G]saved a [D]wretch like [G]me"
    assert chord_progression(text) == ["G", "C", "D"]


def test_complex_chords():
    text = "[Cmaj7]a [G/B]b [Am7b5]c [Ddim]d\n[F#m]e [Bb7sus4]f [C#°7]g"
    assert chord_progression(text) == ["Cmaj7", "G/B", "Am7b5", "Ddim", "F#m", "Bb7sus4", "C#°7"]


def test_skips_directives_and_section_markers():
    text = "{comment: Verse 1}\n[Verse]\n[G]Line with [C]chords\n[Chorus]\n[Am]Another [F]line"
    assert chord_progression(text) == ["G", "C", "Am", "F"]


def test_skips_multi_word_headers():
    assert chord_progression("[Empty Section]\n[G]la [C]la") == ["G", "C"]


def test_no_chords():
    assert chord_progression("") == []
    assert chord_progression("Just lyrics with no chords") == []


# ---------------------------------------------------------------------------
# section_summaries
# ---------------------------------------------------------------------------


def test_bracketed_section_headers():
    text = "{title: Test Song}\n[Verse 1]\n[G]First\n[Chorus]\n[Am]Chorus\n[Verse 2]\n[G]Second\n[Bridge]\n[Em]Bridge"
    assert [s.name for s in section_summaries(text)] == ["Verse 1", "Chorus", "Verse 2", "Bridge"]


def test_unmarked_content_is_an_implicit_verse():
    text = "{title: Test}\n\n[G]First section without marker\n[C]Continues here\n\n[Verse]\n[Am]Explicit verse"
    assert section_summaries(text) == [
        SectionSummary(name="Verse", chords=["G", "C"]),
        SectionSummary(name="Verse", chords=["Am"]),
    ]


def test_chords_per_section():
    text = "[Verse]\n[G]Amazing [C]grace\n[D]How sweet [G]sound\n\n[Chorus]\n[Em]Praise [Am]God\n[F]From whom [G]blessings"
    assert section_summaries(text) == [
        SectionSummary(name="Verse", chords=["G", "C", "D"]),
        SectionSummary(name="Chorus", chords=["Em", "Am", "F", "G"]),
    ]


def test_sections_without_chords():
    text = "[Empty Section]\n\n[Section With No Chords]\nJust lyrics here\nNo chords at all"
    assert section_summaries(text) == [
        SectionSummary(name="Empty Section", chords=[]),
        SectionSummary(name="Section With No Chords", chords=[]),
    ]


def test_section_directives():
    text = "{start_of_verse: Verse 1}\n[G]a\n{end_of_verse}\n{start_of_chorus}\n[C]b\n{end_of_chorus}\n[D]c"
    assert section_summaries(text) == [
        SectionSummary(name="Verse 1", chords=["G"]),
        SectionSummary(name="Chorus", chords=["C"]),
        SectionSummary(name="Verse", chords=["D"]),
    ]


def test_lone_chord_is_not_a_header():
    assert section_summaries("[G]\n[C]la") == [SectionSummary(name="Verse", chords=["G", "C"])]


def test_empty_text_has_no_sections():
    assert section_summaries("") == []


# ---------------------------------------------------------------------------
# lint_source
# ---------------------------------------------------------------------------


def test_clean_source_has_no_issues():
    text = "{title: Test}\n{start_of_chorus}\n[G]Amazing [C]grace\n{end_of_chorus}"
    assert lint_source(text) == []


def test_empty_source_has_no_issues():
    assert lint_source("") == []


def test_malformed_directives():
    issues = lint_source("{incomplete directive\n{: empty name}")
    assert issues == [
        LintIssue(1, "malformed directive (missing closing '}')"),
        LintIssue(2, "malformed directive (empty name)"),
    ]


def test_unmatched_brackets():
    issues = lint_source("[G]fine\nMissing start C]chord\n[C]Valid then [broken")
    assert [str(i) for i in issues] == [
        "line 2: unmatched ']' at column 16",
        "line 3: unmatched '[' at column 15",
    ]


def test_line_numbers():
    issues = lint_source("{title: Valid}\nLine 2 is fine\n[G]Line 3 has [incomplete chord\n{malformed on line 4")
    assert [i.line for i in issues] == [3, 4]


def test_section_pairing():
    issues = lint_source("{end_of_verse}\n{start_of_verse}\na\n{start_of_chorus}\nb")
    assert [str(i) for i in issues] == [
        "line 1: end_of_verse with no open section",
        "line 4: start_of_chorus while 'verse' section is still open",
        "line 4: unterminated section 'chorus'",
    ]
