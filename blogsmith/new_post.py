#!/usr/bin/env python3
"""Create a new post skeleton under ``content/posts/<yyyy>/<mm>/``."""

from __future__ import annotations

import argparse
import datetime as _dt
import pathlib
from typing import Iterable, Sequence

import frontmatter

from .paths import slugify

__all__ = ["create_post", "main"]

DEFAULT_CATEGORY = "general"


def create_post(
    content_dir: pathlib.Path,
    title: str,
    *,
    category: str = DEFAULT_CATEGORY,
    tags: Sequence[str] = (),
    description: str = "",
    slug: str | None = None,
    today: _dt.date | None = None,
) -> pathlib.Path:
    title = title.strip()
    if not title:
        raise ValueError("a post needs a title")

    today = today or _dt.date.today()
    slug = slug or slugify(title)
    if not slug:
        raise ValueError(f"cannot derive a slug from {title!r}; pass one explicitly")

    path = pathlib.Path(content_dir) / "posts" / f"{today:%Y}" / f"{today:%m}" / f"{slug}.md"
    if path.exists():
        raise FileExistsError(f"Post already exists: {path.as_posix()}")

    post = frontmatter.Post(
        f"# {title}\n\nWrite your post here.\n",
        title=title,
        date=today.isoformat(),
        category=category or DEFAULT_CATEGORY,
        tags=[tag.strip() for tag in tags if tag.strip()],
        description=description,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(frontmatter.dumps(post, sort_keys=False) + "\n", encoding="utf-8")
    return path


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a new markdown post.")
    parser.add_argument("title", help="Post title.")
    parser.add_argument("--content-dir", type=pathlib.Path, default=pathlib.Path("content"))
    parser.add_argument("--category", default=DEFAULT_CATEGORY)
    parser.add_argument("--tags", default="", help="Comma separated tags.")
    parser.add_argument("--description", default="")
    parser.add_argument("--slug", default=None, help="Defaults to the slugified title.")
    args = parser.parse_args(argv)

    try:
        path = create_post(
            args.content_dir,
            args.title,
            category=args.category,
            tags=args.tags.split(","),
            description=args.description,
            slug=args.slug,
        )
    except (FileExistsError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 1

    print(f"Created {path}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
