"""Kasten: a slip-box of markdown notes and the links between them."""

from kasten.backlinks import BacklinkIndex
from kasten.config import KastenConfig, load_config
from kasten.errors import (
    ConfigError,
    InvalidIdentityError,
    KastenError,
    MalformedHeaderError,
    SearchFailedError,
    ZettelIOError,
    ZettelNotFoundError,
)
from kasten.index import Kasten, ZettelResult
from kasten.note import Zettel
from kasten.parser import (
    dump_frontmatter,
    format_link,
    normalize_identity,
    parse_frontmatter,
    parse_links,
)

__all__ = [
    "Kasten",
    "Zettel",
    "ZettelResult",
    "BacklinkIndex",
    "KastenConfig",
    "load_config",
    "parse_frontmatter",
    "dump_frontmatter",
    "parse_links",
    "format_link",
    "normalize_identity",
    "KastenError",
    "ZettelIOError",
    "ZettelNotFoundError",
    "MalformedHeaderError",
    "InvalidIdentityError",
    "SearchFailedError",
    "ConfigError",
]
