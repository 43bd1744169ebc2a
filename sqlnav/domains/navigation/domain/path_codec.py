"""Encoding of navigation paths.

An encoded path is the base64 form of every segment joined with ``.``.
The standard base64 alphabet never produces ``.``, so splitting on the
separator always recovers the original segments.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable

PATH_SEPARATOR = "."


def encode_segment(segment: str) -> str:
    return base64.b64encode(segment.encode("utf-8")).decode("ascii")


def decode_segment(segment: str) -> str:
    return base64.b64decode(segment.encode("ascii"), validate=True).decode("utf-8")


def encode_path(segments: Iterable[str]) -> str:
    """Encode root-first clean segments into a single path string."""
    return PATH_SEPARATOR.join(encode_segment(segment) for segment in segments)


def decode_path(encoded: str) -> list[str]:
    """Decode a path produced by :func:`encode_path`.

    Raises:
        ValueError: If a segment is not valid base64 or not UTF-8.
    """
    if not encoded:
        return []
    return [decode_segment(segment) for segment in encoded.split(PATH_SEPARATOR)]
