"""Output routes, relative base paths and slugs.

Every generated page links to site-root assets through a prefix relative to
its own nesting level, so the whole output tree can be served from any
sub-path without rebuilding.
"""

from __future__ import annotations

import pathlib
import re
from typing import Sequence

from .errors import ContentError

__all__ = [
    "ABOUT_ROUTE",
    "BLOG_ROUTE",
    "HOME_ROUTE",
    "archive_route",
    "blog_page_route",
    "category_route",
    "decompose_storage_path",
    "post_route",
    "post_url",
    "resolve_base_path",
    "slugify",
    "tag_route",
]

HOME_ROUTE = "index.html"
ABOUT_ROUTE = "about.html"
BLOG_ROUTE = "blog/index.html"

_STRIP_RE = re.compile(r"[^A-Za-z0-9_\s가-힣-]")
_SPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")
_YEAR_RE = re.compile(r"\d{4}", re.ASCII)
_MONTH_RE = re.compile(r"\d{2}", re.ASCII)


def slugify(text: str) -> str:
    """Return a lowercase, hyphenated slug for ``text``.

    Only ASCII word characters, Hangul syllables, whitespace and hyphens
    survive; whitespace runs become one hyphen.
    """

    slug = _STRIP_RE.sub("", str(text or "").lower())
    slug = _SPACE_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def resolve_base_path(route: str) -> str:
    depth = route.count("/")
    if depth <= 0:
        return "./"
    return "../" * depth


def post_url(year: str, month: str, slug: str) -> str:
    """Canonical, root-absolute url of a post."""

    return f"/blog/{year}/{month}/{slug}.html"


def post_route(year: str, month: str, slug: str) -> str:
    return post_url(year, month, slug)[1:]


def category_route(name: str) -> str:
    return f"category/{slugify(name)}.html"


def tag_route(name: str) -> str:
    return f"tag/{slugify(name)}.html"


def archive_route(year: str, month: str) -> str:
    return f"archive/{year}/{month}.html"


def blog_page_route(page: int) -> str:
    if page <= 1:
        return BLOG_ROUTE
    return f"blog/page/{page}.html"


def _split_parts(path: pathlib.PurePath | str, root: pathlib.PurePath | str | None) -> Sequence[str]:
    text = str(path).replace("\\", "/")
    if root is not None:
        prefix = str(root).replace("\\", "/").rstrip("/") + "/"
        if text.startswith(prefix):
            text = text[len(prefix):]
    return [part for part in text.split("/") if part]


def decompose_storage_path(
    path: pathlib.PurePath | str,
    root: pathlib.PurePath | str | None = None,
) -> tuple[str, str]:
    """Return the ``(year, month)`` segments encoded in a document path.

    The year is the first four-digit directory that is immediately followed
    by a two-digit month directory (``01``-``12``). Paths are examined
    relative to ``root`` when they live under it. Raises ``ContentError``
    when no such pair exists.
    """

    parts = _split_parts(path, root)
    # the last part is the file name
    directories = parts[:-1]
    for index, part in enumerate(directories[:-1]):
        if not _YEAR_RE.fullmatch(part):
            continue
        month = directories[index + 1]
        if _MONTH_RE.fullmatch(month) and 1 <= int(month) <= 12:
            return part, month
    raise ContentError("expected a <yyyy>/<mm>/ directory pair in the storage path", path=path)
