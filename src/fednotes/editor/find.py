"""Find and replace over editor text."""

import re
from dataclasses import dataclass

_REPLACEMENT_TOKEN = re.compile(r"\$(\$|&|\d+)")


@dataclass(frozen=True)
class Match:
    start: int
    end: int
    text: str
    groups: tuple[str | None, ...] = ()


def find_all_matches(
    text: str, search: str, case_sensitive: bool = False, use_regex: bool = False
) -> list[Match]:
    """
    Find every occurrence of ``search`` in ``text``.

    Invalid regular expressions yield no matches.
    """
    if not text or not search:
        return []

    pattern = search if use_regex else re.escape(search)
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(pattern, flags)
    except re.error:
        return []

    return [
        Match(m.start(), m.end(), m.group(0), m.groups()) for m in regex.finditer(text)
    ]


def replace_matches(
    text: str, matches: list[Match], replacement: str, use_regex: bool = False
) -> str:
    """
    Replace the given matches, last first so earlier offsets stay valid.

    In regex mode ``$&`` and ``$0`` insert the whole match, ``$1``.. a group
    and ``$$`` a literal dollar sign.
    """
    if not text or not matches:
        return text

    for match in reversed(matches):
        resolved = (
            _resolve_replacement(replacement, match) if use_regex else replacement
        )
        text = text[: match.start] + resolved + text[match.end :]
    return text


def find_closest_match_index(
    matches: list[Match], position: int, direction: str = "next"
) -> int:
    """
    Index of the match to jump to from ``position``, wrapping around.

    Returns:
        -1 when there are no matches
    """
    if not matches:
        return -1

    if direction == "previous":
        for index in range(len(matches) - 1, -1, -1):
            if matches[index].end <= position:
                return index
        return len(matches) - 1

    for index, match in enumerate(matches):
        if match.start >= position:
            return index
    return 0


def validate_regex(pattern: str) -> tuple[bool, str | None]:
    if not pattern:
        return True, None
    try:
        re.compile(pattern)
    except re.error as e:
        return False, str(e)
    return True, None


def _resolve_replacement(replacement: str, match: Match) -> str:
    if not replacement:
        return ""

    def substitute(token_match: re.Match) -> str:
        token = token_match.group(1)
        if token == "$":
            return "$"
        if token in ("&", "0"):
            return match.text
        index = int(token)
        if index < 1 or index > len(match.groups):
            return ""
        return match.groups[index - 1] or ""

    return _REPLACEMENT_TOKEN.sub(substitute, replacement)
