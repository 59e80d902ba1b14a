"""Zettel: a single note file in the slip-box."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any

import tomli_w

from kasten.errors import (
    InvalidIdentityError,
    MalformedHeaderError,
    ZettelIOError,
    ZettelNotFoundError,
)
from kasten.parser import (
    dump_frontmatter,
    format_link,
    normalize_identity,
    parse_frontmatter,
    parse_links,
)

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


class Zettel:
    """A note: identity, TOML metadata, and markdown body.

    The identity is the note's path relative to the slip-box root and never
    changes. Title, body, and metadata change only through the setters,
    which mark the note dirty without touching the disk.
    """

    def __init__(
        self,
        identity: str,
        metadata: dict[str, Any] | None = None,
        body: str = "",
        *,
        root: Path | str | None = None,
    ) -> None:
        self._identity = normalize_identity(identity)
        self._metadata: dict[str, Any] = dict(metadata or {})
        self._body = body
        self._root = Path(root) if root is not None else None
        self._links: frozenset[str] | None = None
        self.dirty = False

        title = self._metadata.get("title", "")
        if not isinstance(title, str):
            raise MalformedHeaderError(
                f"title must be a string, not {type(title).__name__}", self._identity
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | str, root: Path | str) -> "Zettel":
        """Read and decode the note at *path* (absolute, or relative to *root*)."""
        root = Path(root)
        path = Path(path)
        if not path.is_absolute():
            path = root / path
        try:
            identity = normalize_identity(path.relative_to(root))
        except ValueError as exc:
            raise InvalidIdentityError(path) from exc

        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise ZettelNotFoundError(path) from exc
        except OSError as exc:
            raise ZettelIOError(path, exc.strerror or "read failed") from exc
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ZettelIOError(path, "not valid UTF-8") from exc

        metadata, body = parse_frontmatter(content, source=identity)
        logger.debug("loaded %s", identity)
        return cls(identity, metadata, body, root=root)

    @classmethod
    def new(cls, root: Path | str, title: str = "", body: str = "") -> "Zettel":
        """Create an unsaved note under a fresh identity not yet on disk."""
        root = Path(root)
        while True:
            identity = uuid.uuid4().hex[:12] + NOTE_SUFFIX
            if not (root / identity).exists():
                break
        note = cls(identity, {"title": title}, body, root=root)
        note.dirty = True
        return note

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def title(self) -> str:
        return self._metadata.get("title", "")

    @property
    def body(self) -> str:
        return self._body

    @property
    def metadata(self) -> dict[str, Any]:
        """A copy of the front-matter table, unknown keys included."""
        return dict(self._metadata)

    @property
    def path(self) -> Path | None:
        """Location on disk, or ``None`` when the note was built without a root."""
        if self._root is None:
            return None
        return self._root / self._identity

    def links(self) -> frozenset[str]:
        """Identities referenced from the body, recomputed after :meth:`set_body`."""
        if self._links is None:
            self._links = parse_links(self._body)
        return self._links

    def link_markup(self) -> str:
        """The ``[title](identity)`` text an editor inserts to reference this note."""
        return format_link(self.title, self.identity)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_title(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError("title must be a string")
        self._metadata["title"] = text
        self.dirty = True

    def set_body(self, text: str) -> None:
        self._body = text
        self._links = None
        self.dirty = True

    def set_meta(self, key: str, value: Any) -> None:
        """Set an arbitrary front-matter field; ``title`` must stay a string."""
        if key == "title":
            self.set_title(value)
            return
        try:
            tomli_w.dumps({key: value})
        except TypeError as exc:
            raise TypeError(f"front-matter field {key!r} cannot be stored as TOML: {exc}") from exc
        self._metadata[key] = value
        self.dirty = True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def write(self, root: Path | str) -> Path:
        """Encode the note and write it to ``root/identity``.

        Parent directories are created as needed. The dirty flag is left to
        the caller.
        """
        path = Path(root) / self._identity
        try:
            data = dump_frontmatter(self._metadata, self._body).encode("utf-8")
        except TypeError as exc:
            raise MalformedHeaderError(f"cannot encode front matter: {exc}", self._identity) from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise ZettelIOError(path, exc.strerror or "write failed") from exc
        logger.debug("wrote %s (%d bytes)", self._identity, len(data))
        return path

    # ------------------------------------------------------------------
    # Dunder / export
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Zettel):
            return NotImplemented
        return (
            self._identity == other._identity
            and self._metadata == other._metadata
            and self._body == other._body
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Zettel(identity={self._identity!r}, title={self.title!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "title": self.title,
            "body": self.body,
            "links": sorted(self.links()),
            "metadata": self.metadata,
        }
