"""Parser for the ``.js`` data files of a Twitter archive export.

Each file holds one JavaScript assignment whose right-hand side is a JSON
array of tweets, for example::

    Grailbird.data.tweets_2013_01 =
    [ {"created_at": "...", "text": "...", "entities": {...}} ]

The assignment prefix and the optional trailing ``;`` are stripped and the
remaining text is decoded as JSON. Tweets are returned as plain decoded
values without any schema applied.
"""

from __future__ import annotations

import json
from pathlib import Path
import re

from tweet_index.services.importer.errors import ParseError
from tweet_index.services.importer.types import Record

_ASSIGNMENT_PREFIX = re.compile(
    r"""
    \A\s*
    (?:(?:var|let|const)\s+)?
    (?P<name>[A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)
    \s*=(?!=)\s*
    """,
    re.VERBOSE,
)


def _strip_wrapper(text: str, *, source: str) -> str:
    match = _ASSIGNMENT_PREFIX.match(text)
    if match is None:
        raise ParseError(source, "expected '<name> = [...]' assignment at start of file")

    payload = text[match.end():].rstrip()
    if payload.endswith(";"):
        payload = payload[:-1].rstrip()
    if not payload:
        raise ParseError(source, f"assignment to '{match.group('name')}' has no value")
    return payload


def parse_archive_text(text: str, *, source: str = "<memory>") -> list[Record]:
    if not text.strip():
        return []

    payload = _strip_wrapper(text, source=source)
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ParseError(source, f"invalid JSON payload: {exc}") from exc

    if not isinstance(value, list):
        raise ParseError(source, f"expected a JSON array, got {type(value).__name__}")
    return value


def parse_archive_file(path: Path) -> list[Record]:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(path, f"could not read file: {exc}") from exc

    return parse_archive_text(text, source=str(path))
