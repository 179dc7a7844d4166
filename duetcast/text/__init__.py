"""Transcript text processing utilities."""

from .segmenter import classify_line, segment_transcript, strip_label

__all__ = ["classify_line", "segment_transcript", "strip_label"]
