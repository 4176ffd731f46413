"""YAML/TOML frontmatter handling for notes."""

import logging
from dataclasses import dataclass
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_DELIMITERS = {"---": "yaml", "+++": "toml"}


@dataclass(frozen=True)
class FrontmatterSplit:
    """A note split into its frontmatter block and the body that follows."""

    kind: str | None
    raw: str
    body: str
    body_line_offset: int
    """Number of source lines removed before ``body`` starts."""


def split_frontmatter(content: str) -> FrontmatterSplit:
    """
    Separate a leading ``---`` (YAML) or ``+++`` (TOML) block from the body.

    Leading whitespace after the closing delimiter is dropped as well; the
    returned offset accounts for every removed line so preview anchors can be
    mapped back to editor lines.
    """
    if not content:
        return FrontmatterSplit(None, "", content or "", 0)

    for delimiter, kind in _DELIMITERS.items():
        if not content.startswith(delimiter):
            continue

        end = content.find("\n" + delimiter, len(delimiter))
        if end == -1:
            break

        raw = content[len(delimiter) : end].strip("\n")
        after = content.find("\n", end + len(delimiter) + 1)
        if after == -1:
            # Closing delimiter is the last line
            return FrontmatterSplit(kind, raw, "", content.count("\n") + 1)

        rest = content[after + 1 :]
        body = rest.lstrip()
        removed = content[: after + 1] + rest[: len(rest) - len(body)]
        return FrontmatterSplit(kind, raw, body, removed.count("\n"))

    return FrontmatterSplit(None, "", content, 0)


def strip_frontmatter(content: str) -> str:
    return split_frontmatter(content).body


def parse_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """
    Parse YAML frontmatter from note content.

    Args:
        content: Full note content including frontmatter

    Returns:
        (metadata, body) - metadata is None when there is no YAML block or
        it does not parse to a mapping
    """
    split = split_frontmatter(content)
    if split.kind != "yaml":
        return None, split.body

    try:
        data = yaml.safe_load(split.raw) if split.raw.strip() else {}
    except yaml.YAMLError as e:
        logger.debug("Ignoring invalid YAML frontmatter: %s", e)
        return None, split.body

    if not isinstance(data, dict):
        return None, split.body
    return data, split.body
