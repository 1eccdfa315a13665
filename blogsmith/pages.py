"""Per-route rendering contexts and the two-stage page renderer.

Every route renders its own template first ("content") and then the shared
``layout`` template with that content spliced in. Contexts are fresh dicts
built from the read-only posts and indexes; posts are never mutated.
"""

from __future__ import annotations

import calendar
import datetime as _dt
import pathlib
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

from . import paths
from .config import SiteConfig
from .content import Post
from .errors import ContentError
from .indexes import ArchiveBucket, Indexes
from .report import BuildReport
from .template import TemplateLoader, render

__all__ = [
    "PageRenderer",
    "Sink",
    "archive_context",
    "archive_label",
    "blog_list_pages",
    "category_context",
    "check_bucket_routes",
    "directory_sink",
    "format_date",
    "generate_site",
    "home_context",
    "post_page_context",
    "tag_context",
]

Sink = Callable[[str, str], None]

EXCERPT_LENGTH = 150
LAYOUT_TEMPLATE = "layout"


def directory_sink(output_dir: pathlib.Path) -> Sink:
    """Return a sink writing each route below ``output_dir``."""

    root = pathlib.Path(output_dir)

    def write(route: str, text: str) -> None:
        path = root / route
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    return write


def format_date(value: _dt.datetime | None, style: str = "long") -> str:
    if value is None:
        return ""
    if style == "long":
        return f"{calendar.month_name[value.month]} {value.day}, {value.year}"
    return value.date().isoformat()


def archive_label(year: str, month: str) -> str:
    return f"{calendar.month_name[int(month)]} {year}"


def _excerpt(post: Post) -> str:
    return post.description or post.content[:EXCERPT_LENGTH] + "..."


def _relative(url: str) -> str:
    return url[1:] if url.startswith("/") else url


def _list_item(post: Post) -> dict[str, Any]:
    return post.as_context(
        url=_relative(post.url),
        dateFormatted=format_date(post.date),
        excerpt=_excerpt(post),
        tagsHtml="".join(f'<span class="tag-small">{tag}</span>' for tag in post.tags),
    )


def _summary_item(post: Post) -> dict[str, Any]:
    return post.as_context(url=_relative(post.url), dateFormatted=format_date(post.date))


def _bucket_summaries(buckets: Mapping[str, Sequence[Post]], route: Callable[[str], str]) -> list[dict[str, Any]]:
    return [{"name": name, "count": len(items), "url": route(name)} for name, items in buckets.items()]


def home_context(posts: Sequence[Post], indexes: Indexes, *, limit: int = 5) -> dict[str, Any]:
    recent = posts[:limit]
    return {
        "title": "Home",
        "posts": [_list_item(post) for post in recent],
        "recentPosts": [post.as_context() for post in recent],
        "categories": _bucket_summaries(indexes.categories, paths.category_route),
        "tags": _bucket_summaries(indexes.tags, paths.tag_route),
    }


def _archive_summaries(indexes: Indexes) -> list[dict[str, Any]]:
    return [
        {
            "year": bucket.year,
            "month": bucket.month,
            "posts": list(bucket.posts),
            "label": archive_label(bucket.year, bucket.month),
            "count": len(bucket.posts),
            "url": paths.archive_route(bucket.year, bucket.month),
        }
        for bucket in indexes.sorted_archives()
    ]


def blog_list_pages(
    posts: Sequence[Post],
    indexes: Indexes,
    *,
    per_page: int = 0,
) -> list[tuple[str, dict[str, Any]]]:
    """Return ``(route, context)`` pairs for the blog listing.

    ``per_page == 0`` keeps every post on ``blog/index.html``; otherwise the
    listing is split and later pages go to ``blog/page/<n>.html``.
    """

    if per_page > 0 and posts:
        chunks = [posts[start:start + per_page] for start in range(0, len(posts), per_page)]
    else:
        chunks = [posts]

    archives = _archive_summaries(indexes)
    total = len(chunks)
    pages: list[tuple[str, dict[str, Any]]] = []
    for number, chunk in enumerate(chunks, start=1):
        route = paths.blog_page_route(number)
        base_path = paths.resolve_base_path(route)
        context = {
            "title": "Blog" if number == 1 else f"Blog - Page {number}",
            "posts": [_list_item(post) for post in chunk],
            "archives": archives,
            "page": number,
            "totalPages": total,
            "hasPrevPage": number > 1,
            "hasNextPage": number < total,
            "prevPageUrl": f"{base_path}{paths.blog_page_route(number - 1)}" if number > 1 else "",
            "nextPageUrl": f"{base_path}{paths.blog_page_route(number + 1)}" if number < total else "",
        }
        pages.append((route, context))
    return pages


def post_page_context(posts: Sequence[Post], index: int) -> dict[str, Any]:
    """Context for ``posts[index]`` with links to its neighbours.

    ``posts`` is newest first, so the previous (older) post sits at
    ``index + 1`` and the next (newer) one at ``index - 1``.
    """

    post = posts[index]
    base_path = paths.resolve_base_path(paths.post_route(post.year, post.month, post.slug))
    prev_post = posts[index + 1] if index + 1 < len(posts) else None
    next_post = posts[index - 1] if index > 0 else None

    return post.as_context(
        dateFormatted=format_date(post.date),
        tagsHtml="".join(
            f'<a href="{base_path}{paths.tag_route(tag)}" class="tag">{tag}</a>' for tag in post.tags
        ),
        categoryUrl=f"{base_path}{paths.category_route(post.category)}",
        hasPrev=prev_post is not None,
        hasNext=next_post is not None,
        prevPostTitle=prev_post.title if prev_post else "",
        prevPostUrl=f"{base_path}{_relative(prev_post.url)}" if prev_post else "",
        nextPostTitle=next_post.title if next_post else "",
        nextPostUrl=f"{base_path}{_relative(next_post.url)}" if next_post else "",
    )


def category_context(name: str, posts: Sequence[Post]) -> dict[str, Any]:
    return {
        "title": f"Category: {name}",
        "name": name,
        "posts": [_summary_item(post) for post in posts],
        "count": len(posts),
    }


def tag_context(name: str, posts: Sequence[Post]) -> dict[str, Any]:
    return {
        "title": f"Tag: {name}",
        "name": name,
        "posts": [_summary_item(post) for post in posts],
        "count": len(posts),
    }


def archive_context(bucket: ArchiveBucket) -> dict[str, Any]:
    label = archive_label(bucket.year, bucket.month)
    return {
        "title": f"Archive: {label}",
        "year": bucket.year,
        "month": bucket.month,
        "label": label,
        "posts": [_summary_item(post) for post in bucket.posts],
        "count": len(bucket.posts),
    }


class PageRenderer:
    """Render routes through their template and the shared layout."""

    def __init__(
        self,
        config: SiteConfig,
        sink: Sink,
        *,
        loader: TemplateLoader | None = None,
        report: BuildReport | None = None,
        current_year: int | None = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.loader = loader or TemplateLoader(config.templates_dir)
        self.report = report if report is not None else BuildReport()
        self.current_year = current_year or _dt.date.today().year

    def site_context(self) -> dict[str, Any]:
        return {
            "siteTitle": self.config.site_title,
            "siteDescription": self.config.site_description,
            "baseUrl": self.config.base_url,
            "currentYear": self.current_year,
        }

    def render_page(self, template_name: str, data: Mapping[str, Any], route: str) -> str:
        layout = self.loader.load(LAYOUT_TEMPLATE)
        template = self.loader.load(template_name)
        base_path = paths.resolve_base_path(route)

        content = render(template, {**data, "basePath": base_path})
        return render(layout, {**data, "basePath": base_path, "content": content, **self.site_context()})

    def generate(self, template_name: str, data: Mapping[str, Any], route: str) -> str:
        page = self.render_page(template_name, data, route)
        self.sink(route, page)
        self.report.record_page(route)
        print(f"  ✓ Generated: {route}")
        return page


def _check_routes(names: Iterable[str], route: Callable[[str], str], kind: str) -> None:
    seen: dict[str, str] = {}
    for name in names:
        if not paths.slugify(name):
            raise ContentError(f"{kind} {name!r} leaves nothing to build a page name from")
        target = route(name)
        other = seen.get(target)
        if other is not None:
            raise ContentError(f"{kind} names {other!r} and {name!r} both map to {target}")
        seen[target] = name


def check_bucket_routes(indexes: Indexes) -> None:
    """Raise ``ContentError`` when two category or tag names share a page."""

    _check_routes(indexes.categories, paths.category_route, "category")
    _check_routes(indexes.tags, paths.tag_route, "tag")


def _routes(
    posts: Sequence[Post],
    indexes: Indexes,
    config: SiteConfig,
    about: Mapping[str, Any] | None,
) -> Iterator[tuple[str, str, dict[str, Any] | None]]:
    yield "home", paths.HOME_ROUTE, home_context(posts, indexes, limit=config.home_post_count)
    yield "about", paths.ABOUT_ROUTE, dict(about) if about is not None else None
    for route, context in blog_list_pages(posts, indexes, per_page=config.posts_per_page):
        yield "blog-list", route, context
    for index, post in enumerate(posts):
        yield "post", paths.post_route(post.year, post.month, post.slug), post_page_context(posts, index)
    for name, items in indexes.categories.items():
        yield "category", paths.category_route(name), category_context(name, items)
    for name, items in indexes.tags.items():
        yield "tag", paths.tag_route(name), tag_context(name, items)
    for bucket in indexes.archives.values():
        yield "archive", paths.archive_route(bucket.year, bucket.month), archive_context(bucket)


def generate_site(
    posts: Sequence[Post],
    indexes: Indexes,
    renderer: PageRenderer,
    *,
    about: Mapping[str, Any] | None = None,
) -> BuildReport:
    """Render every route in order: home, about, blog listing, posts,
    categories, tags, archives. Optional pages with no data are skipped."""

    check_bucket_routes(indexes)
    for template_name, route, context in _routes(posts, indexes, renderer.config, about):
        if context is None:
            renderer.report.record_skip(route)
            continue
        renderer.generate(template_name, context, route)
    return renderer.report
