class ChordSheetError(Exception):
    """Base exception for chordsheet."""


class SourceError(ChordSheetError):
    """Raised when a ChordPro source cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")
