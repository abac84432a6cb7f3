"""Split display text into speakable segments."""

import re

from readalong.constants import SEGMENT_SPLIT_THRESHOLD

# Sentence end followed by whitespace; the whitespace stays with the next piece
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])(?=\s)")


def _split_long_segment(text: str, threshold: int = SEGMENT_SPLIT_THRESHOLD) -> list[str]:
    """Split text longer than threshold at word boundaries."""
    if len(text) <= threshold:
        return [text]

    words = text.split()
    chunks = []
    current = ""

    for word in words:
        if current and len(current) + len(word) + 1 > threshold:
            chunks.append(current)
            current = word
        else:
            current = current + " " + word if current else word

    if current:
        chunks.append(current)

    return chunks if chunks else [text]


def preprocess_for_tts(text: str, max_chars: int = SEGMENT_SPLIT_THRESHOLD) -> list[str]:
    """Split text into an ordered list of segments.

    Lines are split first, then sentences inside each line. Blank lines become
    empty segments so every source line keeps an index slot; callers skip
    them when speaking. Returns [] for empty input.
    """
    if not text:
        return []

    segments = []
    for line in text.splitlines():
        if not line.strip():
            segments.append("")
            continue
        for sentence in _SENTENCE_BOUNDARY_RE.split(line):
            if not sentence.strip():
                continue
            segments.extend(_split_long_segment(sentence, max_chars))

    return segments
