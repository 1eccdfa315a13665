"""Build configuration.

Values are resolved from defaults, an optional JSON file, ``BLOG_*``
environment variables and finally explicit overrides (usually CLI flags),
in that order of precedence.
"""

from __future__ import annotations

import dataclasses
import json
import os
import pathlib
import sys
from typing import Any, Mapping

from .errors import ConfigError

__all__ = ["ENV_VARS", "SiteConfig", "load_config"]

DEFAULT_SITE_DESCRIPTION = "Notes on development and everyday life"

ENV_VARS = {
    "content_dir": "BLOG_CONTENT_DIR",
    "templates_dir": "BLOG_TEMPLATES_DIR",
    "public_dir": "BLOG_PUBLIC_DIR",
    "output_dir": "BLOG_OUTPUT_DIR",
    "posts_per_page": "BLOG_POSTS_PER_PAGE",
    "site_title": "BLOG_SITE_TITLE",
    "site_description": "BLOG_SITE_DESCRIPTION",
    "base_url": "BLOG_BASE_URL",
}

_PATH_FIELDS = ("content_dir", "templates_dir", "public_dir", "output_dir")
_INT_FIELDS = ("posts_per_page", "home_post_count")


@dataclasses.dataclass(frozen=True, slots=True)
class SiteConfig:
    content_dir: pathlib.Path = pathlib.Path("content")
    templates_dir: pathlib.Path = pathlib.Path("templates")
    public_dir: pathlib.Path = pathlib.Path("public")
    output_dir: pathlib.Path = pathlib.Path("dist")
    posts_per_page: int = 0
    home_post_count: int = 5
    site_title: str = "My Blog"
    site_description: str = DEFAULT_SITE_DESCRIPTION
    # prefix for serving from a sub-path, e.g. "/repo-name" on GitHub Pages
    base_url: str = ""
    strict_dates: bool = True
    fallback_category: str = "uncategorized"

    def __post_init__(self) -> None:
        for name in _PATH_FIELDS:
            object.__setattr__(self, name, pathlib.Path(getattr(self, name)))
        for name in _INT_FIELDS:
            try:
                value = int(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"{name} must be an integer") from exc
            if value < 0:
                raise ConfigError(f"{name} must not be negative")
            object.__setattr__(self, name, value)

    @property
    def posts_dir(self) -> pathlib.Path:
        return self.content_dir / "posts"

    def replace(self, **changes: Any) -> "SiteConfig":
        return dataclasses.replace(self, **changes)


_DEFAULTS = {field.name: field.default for field in dataclasses.fields(SiteConfig)}


def _env_int(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return fallback
    raw = raw.strip()
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError:
        print(f"[config] Warning: invalid {name}={raw!r}; using {fallback}", file=sys.stderr)
        return fallback


def _read_config_file(path: pathlib.Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path.as_posix()}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path.as_posix()}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected an object in {path.as_posix()}, got {type(data).__name__}")

    known = {field.name for field in dataclasses.fields(SiteConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path.as_posix()}: {', '.join(unknown)}")
    return data


def _from_env(values: dict[str, Any]) -> dict[str, Any]:
    resolved = dict(values)
    for field, env_name in ENV_VARS.items():
        if field in _INT_FIELDS:
            fallback = resolved.get(field, _DEFAULTS[field])
            resolved[field] = _env_int(env_name, fallback)
            continue
        raw = os.getenv(env_name)
        if raw is not None and raw.strip():
            resolved[field] = raw.strip()
    return resolved


def load_config(
    path: pathlib.Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> SiteConfig:
    values: dict[str, Any] = {}
    if path is not None:
        values.update(_read_config_file(path))
    values = _from_env(values)
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    try:
        return SiteConfig(**values)
    except TypeError as exc:
        raise ConfigError(str(exc)) from exc
