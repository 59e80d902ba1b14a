"""Slip-box configuration.

The configuration lives in ``~/.kasten/config.toml`` (or the file named by
``KASTEN_CONFIG``) and is written with defaults on first use::

    [repo]
    path = "Kasten"    # relative paths resolve against the home directory

Environment variables (override the file):
    KASTEN_CONFIG – path of the config file
    KASTEN_ROOT   – slip-box directory
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from kasten.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_CONTENT = """\
[repo]
path = "Kasten"
"""


def default_config_path() -> Path:
    env = os.getenv("KASTEN_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".kasten" / "config.toml"


@dataclass
class KastenConfig:
    path: Path  # the config file this was read from
    repo: str
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, path: Path, data: dict[str, Any]) -> "KastenConfig":
        repo = data.get("repo")
        if not isinstance(repo, dict) or not isinstance(repo.get("path"), str):
            raise ConfigError(path, "missing string setting [repo] path")
        return cls(
            path=path,
            repo=repo["path"],
            extra={k: v for k, v in data.items() if k != "repo"},
        )

    @property
    def repo_path(self) -> Path:
        """Absolute slip-box directory; ``KASTEN_ROOT`` wins over the file."""
        raw = Path(os.getenv("KASTEN_ROOT") or self.repo).expanduser()
        if not raw.is_absolute():
            raw = Path.home() / raw
        return raw.resolve()

    def ensure_repo(self) -> Path:
        """Create the slip-box directory if it does not exist yet."""
        repo = self.repo_path
        if not repo.is_dir():
            logger.info("creating slip-box directory %s", repo)
            repo.mkdir(parents=True, exist_ok=True)
        return repo


def load_config(path: Path | str | None = None, *, create: bool = True) -> KastenConfig:
    """Read the configuration, writing the default file first if *create* and missing."""
    path = Path(path).expanduser() if path is not None else default_config_path()

    if create and not path.exists():
        logger.info("writing default configuration to %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG_CONTENT, encoding="utf-8")

    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(path, "configuration file not found") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, f"invalid TOML: {exc}") from exc

    return KastenConfig.from_dict(path, data)
