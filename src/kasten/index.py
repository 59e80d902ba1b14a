"""Kasten: the directory-backed slip-box of notes."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from kasten.backlinks import BacklinkIndex
from kasten.errors import KastenError, SearchFailedError
from kasten.note import NOTE_SUFFIX, Zettel
from kasten.parser import normalize_identity

if TYPE_CHECKING:
    from kasten.config import KastenConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZettelResult:
    """Outcome of loading one file during iteration: a note or an error."""

    identity: str
    zettel: Zettel | None = None
    error: KastenError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Zettel:
        """Return the note, or raise the error it failed with."""
        if self.error is not None:
            raise self.error
        assert self.zettel is not None
        return self.zettel


class Kasten:
    """A slip-box rooted at one directory.

    Notes are not cached: every :meth:`load` and every pass of
    :meth:`iterate` reads the files again. The only state kept between
    calls is the backlink index, built on first use and patched by
    :meth:`save`.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser().resolve()
        if not self.root.is_dir():
            raise NotADirectoryError(f"slip-box root is not a directory: {self.root}")
        self._index: BacklinkIndex | None = None

    @classmethod
    def from_config(cls, config: "KastenConfig") -> "Kasten":
        return cls(config.ensure_repo())

    def __repr__(self) -> str:
        return f"Kasten({str(self.root)!r})"

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def _note_paths(self) -> list[Path]:
        paths: list[Path] = []
        for path in self.root.rglob(f"*{NOTE_SUFFIX}"):
            rel = path.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts):
                continue
            # dangling links stay listed so loading them reports the error
            if path.is_file() or path.is_symlink():
                paths.append(path)
        return sorted(paths)

    def iterate(self) -> Iterator[ZettelResult]:
        """Yield one :class:`ZettelResult` per note file under the root.

        The directory is listed up front; each file is read only when its
        result is produced. A bad file becomes an error result and the walk
        carries on.
        """
        for path in self._note_paths():
            identity = normalize_identity(path.relative_to(self.root))
            try:
                zettel = Zettel.load(path, self.root)
            except KastenError as exc:
                logger.warning("skipping %s: %s", identity, exc)
                yield ZettelResult(identity, error=exc)
            else:
                yield ZettelResult(identity, zettel=zettel)

    def __iter__(self) -> Iterator[ZettelResult]:
        return self.iterate()

    # ------------------------------------------------------------------
    # Single notes
    # ------------------------------------------------------------------

    def load(self, identity: str) -> Zettel:
        """Load the note stored under *identity*."""
        return Zettel.load(normalize_identity(identity), self.root)

    def create(self, title: str = "", body: str = "") -> Zettel:
        """Start a new note; nothing is written until :meth:`save`."""
        return Zettel.new(self.root, title=title, body=body)

    def save(self, note: Zettel) -> Path:
        """Write *note* to disk and patch the backlink index if it is built."""
        path = note.write(self.root)
        note.dirty = False
        if self._index is not None:
            self._index.update(note.identity, note.links())
        return path

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search_title(self, query: str) -> set[str]:
        """Identities of notes whose title contains *query*, ignoring case.

        Raises :class:`SearchFailedError` carrying the partial matches when
        any note could not be read.
        """
        q = query.casefold()
        matches: set[str] = set()
        failures: dict[str, KastenError] = {}
        for result in self.iterate():
            if not result.ok:
                failures[result.identity] = result.error
            elif q in result.zettel.title.casefold():
                matches.add(result.identity)
        if failures:
            raise SearchFailedError(matches, failures)
        return matches

    @property
    def index_built(self) -> bool:
        return self._index is not None

    def build_index(self) -> BacklinkIndex:
        """(Re-)scan every note and rebuild the backlink index."""
        index = BacklinkIndex()
        index.build(self.iterate())
        self._index = index
        return index

    def _built_index(self) -> BacklinkIndex:
        if self._index is None:
            return self.build_index()
        return self._index

    def backlinks(self, identity: str) -> set[str]:
        """Identities of the notes whose body links to *identity*."""
        return self._built_index().backlinks(normalize_identity(identity))

    def links(self, identity: str) -> set[str]:
        """Identities *identity* links to, according to the backlink index."""
        return self._built_index().links(normalize_identity(identity))
