"""TOML front-matter codec and ``[title](identity)`` link extractor."""

from __future__ import annotations

import posixpath
import re
import tomllib
from collections.abc import Iterator
from pathlib import PurePath, PurePosixPath
from typing import Any

import tomli_w

from kasten.errors import InvalidIdentityError, MalformedHeaderError

#: Opening and closing line of the front-matter block.
DELIMITER = "+++"

# [title](identity), but not ![alt](image). The title may hold escaped or
# balanced brackets; the identity is <angled> or holds balanced parentheses.
_LINK_RE = re.compile(
    r"(?<!!)\[(?P<title>(?:\\.|[^\[\]\\\n]|\[[^\[\]\n]*\])*)\]"
    r"\((?:<(?P<angled>[^<>\n]*)>|(?P<target>(?:[^()\n]|\([^()\n]*\))*))\)"
)
_TITLE_ESCAPE_RE = re.compile(r"([\\\[\]])")
# http:, mailto:, file: ... targets are external, not notes
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------


def normalize_identity(value: str | PurePath) -> str:
    """Return *value* as a forward-slash path relative to the slip-box root.

    ``a\\b.md``, ``./a/b.md`` and ``a//b.md`` all normalise to ``a/b.md``.
    Raises :class:`InvalidIdentityError` for empty, absolute, or
    root-escaping identities.
    """
    text = str(value).replace("\\", "/")
    if not text:
        raise InvalidIdentityError(value)
    pure = PurePosixPath(posixpath.normpath(text))
    if pure.is_absolute() or not pure.parts or pure.parts[0] == "..":
        raise InvalidIdentityError(value)
    return pure.as_posix()


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------


def _lines(content: str) -> Iterator[str]:
    """Yield the lines of *content*, each keeping its ``\\n`` terminator."""
    start = 0
    while start < len(content):
        end = content.find("\n", start)
        end = len(content) if end == -1 else end + 1
        yield content[start:end]
        start = end


def _is_delimiter(line: str) -> bool:
    return line.removesuffix("\n").removesuffix("\r") == DELIMITER


def parse_frontmatter(content: str, source: str | None = None) -> tuple[dict[str, Any], str]:
    """Split the ``+++`` TOML block from the body text.

    Returns ``(metadata, body)``. Without an opening ``+++`` line the
    metadata is empty and the body is *content* unchanged. The ``title``
    key is not defaulted here.

    Raises :class:`MalformedHeaderError` when the block is never closed or
    its TOML does not parse; *source* names the note in the message.
    """
    lines = _lines(content)
    first = next(lines, "")
    if not _is_delimiter(first):
        return {}, content

    offset = len(first)
    header: list[str] = []
    for line in lines:
        offset += len(line)
        if _is_delimiter(line):
            break
        header.append(line)
    else:
        raise MalformedHeaderError(f"no closing {DELIMITER!r} line", source)

    try:
        meta = tomllib.loads("".join(header))
    except tomllib.TOMLDecodeError as exc:
        raise MalformedHeaderError(str(exc), source) from exc
    return meta, content[offset:]


def dump_frontmatter(metadata: dict[str, Any], body: str) -> str:
    """Inverse of :func:`parse_frontmatter`: delimiter, TOML, delimiter, body."""
    return f"{DELIMITER}\n{tomli_w.dumps(metadata)}{DELIMITER}\n{body}"


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


def parse_links(text: str) -> frozenset[str]:
    """Return the identities of every ``[title](identity)`` reference in *text*.

    Incomplete brackets, images, URLs, and anchors are skipped rather than
    reported; a missing link only means a missing backlink.
    """
    found: set[str] = set()
    for m in _LINK_RE.finditer(text):
        target = m.group("angled")
        if target is None:
            target = m.group("target")
        # a.md#heading links to a.md
        target = target.split("#", 1)[0].strip()
        if not target or _SCHEME_RE.match(target):
            continue
        try:
            found.add(normalize_identity(target))
        except InvalidIdentityError:
            continue
    return frozenset(found)


def format_link(title: str, identity: str) -> str:
    """Build a ``[title](identity)`` reference that :func:`parse_links` reads back.

    Brackets in *title* are backslash-escaped; an identity containing
    parentheses is wrapped in ``<...>``.
    """
    title = _TITLE_ESCAPE_RE.sub(r"\\\1", " ".join(title.splitlines()))
    if "(" in identity or ")" in identity:
        identity = f"<{identity}>"
    return f"[{title}]({identity})"
