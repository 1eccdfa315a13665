"""Load markdown documents and normalise them into posts.

Documents live under ``<content_dir>/posts/<yyyy>/<mm>/<slug>.md`` and carry
a YAML front matter header. The loader renders every body to HTML and
returns the posts newest first; that order is established here once and the
rest of the build relies on it.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import pathlib
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, Mapping

import frontmatter
import markdown
import yaml

from .config import SiteConfig
from .errors import ContentError
from .paths import decompose_storage_path, post_url

__all__ = [
    "Post",
    "load_page",
    "load_posts",
    "normalize_post",
    "parse_date",
    "render_markdown",
    "sort_posts",
]

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite", "nl2br"]
MARKDOWN_EXTENSION_CONFIGS = {
    "codehilite": {"css_class": "hljs", "guess_lang": False},
}

# front matter keys that become Post fields rather than extras
_RESERVED_KEYS = {"title", "date", "category", "tags", "description"}

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)


@dataclasses.dataclass(frozen=True, slots=True)
class Post:
    """A normalised blog post. Never mutated once loaded."""

    slug: str
    title: str
    date: _dt.datetime | None
    category: str
    tags: tuple[str, ...]
    year: str
    month: str
    url: str
    content: str
    html: str
    description: str = ""
    extra: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def archive_key(self) -> str:
        return f"{self.year}-{self.month}"

    def as_context(self, **overrides: Any) -> dict[str, Any]:
        """Return a fresh rendering mapping for this post plus ``overrides``."""

        context: dict[str, Any] = dict(self.extra)
        context.update(
            slug=self.slug,
            title=self.title,
            date=self.date.date().isoformat() if self.date else "",
            category=self.category,
            tags=list(self.tags),
            year=self.year,
            month=self.month,
            url=self.url,
            content=self.content,
            html=self.html,
            description=self.description,
        )
        context.update(overrides)
        return context


def parse_date(value: Any) -> _dt.datetime | None:
    """Parse a front matter date into a naive UTC datetime, or ``None``."""

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, _dt.datetime):
        dt = value
    elif isinstance(value, _dt.date):
        return _dt.datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        iso_candidate = text
        if iso_candidate.endswith("Z"):
            iso_candidate = iso_candidate[:-1] + "+00:00"
        try:
            dt = _dt.datetime.fromisoformat(iso_candidate)
        except ValueError:
            dt = None
        if dt is None:
            try:
                dt = parsedate_to_datetime(text)
            except (TypeError, ValueError):
                dt = None
        if dt is None:
            for fmt in _DATE_FORMATS:
                try:
                    dt = _dt.datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if dt is None:
            return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return dt


def _coerce_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    tags: list[str] = []
    for raw in value:
        text = str(raw or "").strip()
        if text and text not in tags:
            tags.append(text)
    return tuple(tags)


def render_markdown(text: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    return md.convert(text)


def normalize_post(
    metadata: Mapping[str, Any],
    body: str,
    path: pathlib.Path,
    *,
    root: pathlib.Path | None = None,
    html: str | None = None,
    fallback_category: str = "uncategorized",
    strict_dates: bool = True,
) -> Post:
    """Build a :class:`Post` from one parsed document.

    ``year``/``month`` come from the storage path and the slug from the file
    name. A missing or unparseable date raises ``ContentError`` unless
    ``strict_dates`` is false, in which case the post is kept undated.
    """

    year, month = decompose_storage_path(path, root)
    slug = pathlib.PurePath(path).stem

    date = parse_date(metadata.get("date"))
    if date is None and strict_dates:
        raise ContentError(f"invalid or missing date {metadata.get('date')!r}", path=path)

    title = str(metadata.get("title") or "").strip() or slug
    category = str(metadata.get("category") or "").strip() or fallback_category
    description = str(metadata.get("description") or "").strip()
    extra = {key: value for key, value in metadata.items() if key not in _RESERVED_KEYS}

    return Post(
        slug=slug,
        title=title,
        date=date,
        category=category,
        tags=_coerce_tags(metadata.get("tags")),
        year=year,
        month=month,
        url=post_url(year, month, slug),
        content=body,
        html=render_markdown(body) if html is None else html,
        description=description,
        extra=extra,
    )


def sort_posts(posts: Iterable[Post]) -> list[Post]:
    """Order posts newest first, ties by slug, undated posts last."""

    ordered = sorted(posts, key=lambda post: post.slug)
    dated = [post for post in ordered if post.date is not None]
    undated = [post for post in ordered if post.date is None]
    dated.sort(key=lambda post: post.date, reverse=True)
    return dated + undated


def _check_unique_urls(posts: Iterable[Post]) -> None:
    seen: dict[str, Post] = {}
    for post in posts:
        if post.url in seen:
            raise ContentError(f"duplicate post url {post.url} (slug {post.slug!r})")
        seen[post.url] = post


def _read_document(path: pathlib.Path) -> frontmatter.Post:
    try:
        return frontmatter.loads(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ContentError(f"invalid front matter: {exc}", path=path) from exc


def load_posts(config: SiteConfig) -> list[Post]:
    posts_dir = config.posts_dir
    if not posts_dir.exists():
        return []

    posts: list[Post] = []
    for path in sorted(posts_dir.rglob("*.md")):
        if not path.is_file():
            continue
        document = _read_document(path)
        posts.append(
            normalize_post(
                document.metadata,
                document.content,
                path,
                root=posts_dir,
                fallback_category=config.fallback_category,
                strict_dates=config.strict_dates,
            )
        )

    _check_unique_urls(posts)
    return sort_posts(posts)


def load_page(config: SiteConfig, name: str) -> dict[str, Any] | None:
    """Return the singleton page ``<content_dir>/<name>.md`` or ``None``."""

    path = config.content_dir / f"{name}.md"
    if not path.exists():
        return None

    document = _read_document(path)
    page = dict(document.metadata)
    page["content"] = document.content
    page["html"] = render_markdown(document.content)
    return page
