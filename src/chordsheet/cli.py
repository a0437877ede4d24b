import dataclasses
import json
import logging
import re
import sys
import unicodedata
from pathlib import Path

import click

from .exceptions import SourceError
from .models import Song
from .renderer import ChordSheetRenderer
from .utils import lint_source, load_source


# Apostrophes are dropped rather than split on: "Blowin'" -> "blowin".
_APOSTROPHES = str.maketrans("", "", "'\u2019")
_SLUG_WORD_RE = re.compile(r"[a-z0-9]+")


def _slugify(text: str) -> str:
    """Filename-safe form of a song title or artist: ``Señor, Tú`` -> ``senor-tu``."""
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return "-".join(_SLUG_WORD_RE.findall(folded.translate(_APOSTROPHES).lower()))


def _default_filename(song: Song, source: str, suffix: str) -> str:
    if song.title:
        stem = "-".join(_slugify(part) for part in (song.artist, song.title) if part)
    elif source != "-":
        stem = Path(source).stem
    else:
        stem = "song"
    return f"{stem or 'song'}{suffix}"


@click.command()
@click.argument("source", metavar="PATH")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <artist>-<title>.html)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Emit the parsed song model as JSON instead of HTML.")
@click.option("--escape", is_flag=True, default=False,
              help="HTML-escape lyrics, chords and metadata.")
@click.option("--check", is_flag=True, default=False,
              help="Only report problems in the source; exit 1 if any are found.")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Log parser decisions to stderr.")
def main(source: str, output_path: str | None, stdout: bool, as_json: bool,
         escape: bool, check: bool, verbose: bool) -> None:
    """Render a ChordPro file as a chord sheet.

    \b
    PATH is a ChordPro (.cho / .pro) file, or - to read stdin.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")

    # --- Read ---
    try:
        text = load_source(source)
    except SourceError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    # --- Lint only ---
    if check:
        issues = lint_source(text)
        for issue in issues:
            click.echo(f"{source}: {issue}", err=True)
        if issues:
            sys.exit(1)
        click.echo(f"{source}: OK")
        return

    # --- Parse + render ---
    renderer = ChordSheetRenderer(raw=not escape)
    song = renderer.parse(text)
    if as_json:
        output = json.dumps(dataclasses.asdict(song), indent=2, ensure_ascii=False) + "\n"
        suffix = ".json"
    else:
        output = renderer.render(song) + "\n"
        suffix = ".html"

    # --- Output ---
    if stdout:
        click.echo(output, nl=False)
        return

    dest = Path(output_path) if output_path else Path(_default_filename(song, source, suffix))
    dest.write_text(output, encoding="utf-8")
    click.echo(f"Written to {dest}")
