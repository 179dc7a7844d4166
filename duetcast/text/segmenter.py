"""Speaker segmentation for two-voice podcast transcripts.

Responsibilities:
- Classify transcript lines by a leading `Host`/`Guest` label.
- Merge consecutive same-speaker lines into ordered speaker chunks.

Label rule:
    A line is labeled when, after optional leading whitespace and optional
    markdown emphasis (`*`, `_`), it starts with the word `Host` or `Guest`
    (case-insensitive) followed by an ASCII `:` or full-width `：` colon.
    Emphasis markers may also wrap the label or the colon (`**Host:**`).
    A label appearing later in a line does not count.
"""

from __future__ import annotations

import re

from ..models.datatypes import Chunk, LineLabel, Speaker

_LABEL_PATTERN = re.compile(
    r"^\s*[*_]*\s*(?P<label>host|guest)\s*[*_]*\s*[:：][*_]*\s*",
    re.IGNORECASE,
)


def classify_line(line: str) -> LineLabel:
    """Return the speaker label found at the start of a transcript line."""

    match = _LABEL_PATTERN.match(line)
    if match is None:
        return LineLabel.NO_LABEL
    return LineLabel(match.group("label").lower())


def strip_label(line: str) -> str:
    """Remove a leading speaker label and its separator from a line."""

    return _LABEL_PATTERN.sub("", line, count=1)


def _append(buffer: str, text: str) -> str:
    """Append one line of text to a speaker buffer, space-separated."""

    if not buffer:
        buffer = " "
    return f"{buffer}{text} "


def segment_transcript(transcript: str) -> list[Chunk]:
    """Split a transcript into ordered speaker chunks.

    Unlabeled lines before the first label are dropped; later unlabeled lines
    continue the current speaker. A chunk boundary is created only when the
    speaker changes. Whitespace-only buffers are never emitted.
    """

    chunks: list[Chunk] = []
    current: Speaker | None = None
    buffer = ""

    for line in transcript.splitlines():
        if not line.strip():
            continue
        speaker = classify_line(line).speaker()
        if speaker is not None:
            if current is not None and speaker is not current:
                if buffer.strip():
                    chunks.append(Chunk(speaker=current, text=buffer))
                buffer = ""
            current = speaker
            buffer = _append(buffer, strip_label(line))
        elif current is not None:
            buffer = _append(buffer, line)

    if current is not None and buffer.strip():
        chunks.append(Chunk(speaker=current, text=buffer))
    return chunks
