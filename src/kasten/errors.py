"""Exception hierarchy shared by the codec, notes, and the slip-box."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class KastenError(Exception):
    """Base class for every error raised by :mod:`kasten`."""


class ZettelIOError(KastenError):
    """A note file could not be read or written."""

    def __init__(self, path: Path | str, message: str = "I/O error") -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class ZettelNotFoundError(ZettelIOError):
    """The note file does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, "note not found")


class MalformedHeaderError(KastenError):
    """The ``+++`` front-matter block is unterminated or not valid TOML."""

    def __init__(self, reason: str, source: str | None = None) -> None:
        self.reason = reason
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"malformed front matter{where}: {reason}")


class InvalidIdentityError(KastenError, ValueError):
    """An identity is empty, absolute, or escapes the slip-box root."""

    def __init__(self, identity: object) -> None:
        self.identity = identity
        super().__init__(f"invalid note identity: {identity!r}")


class SearchFailedError(KastenError):
    """Some notes could not be read during a title search.

    ``matches`` holds the identities that did match among the notes that
    loaded; ``failures`` maps each skipped identity to its error.
    """

    def __init__(self, matches: set[str], failures: Mapping[str, KastenError]) -> None:
        self.matches = set(matches)
        self.failures = dict(failures)
        super().__init__(
            f"title search skipped {self.skipped} unreadable note(s): "
            + ", ".join(sorted(self.failures))
        )

    @property
    def skipped(self) -> int:
        return len(self.failures)


class ConfigError(KastenError):
    """The configuration file is unreadable or incomplete."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")
