"""Static blog generator: markdown posts in, cross-linked HTML pages out."""

from .config import SiteConfig, load_config
from .paths import resolve_base_path, slugify
from .template import render

__all__ = ["SiteConfig", "load_config", "render", "resolve_base_path", "slugify"]
