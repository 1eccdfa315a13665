#!/usr/bin/env python3
"""Build the static blog.

The output directory is wiped, static files from ``public/`` are copied
over, posts are loaded and indexed, and every route is rendered through the
templates. Any error aborts the whole build; a failed run can leave the
output directory empty or partially written.

Usage:
    python -m blogsmith [--content-dir content] [--output-dir dist] ...

Every option can also be supplied through a JSON ``--config`` file or the
``BLOG_*`` environment variables listed in :mod:`blogsmith.config`.
"""

from __future__ import annotations

import argparse
import pathlib
import shutil
import sys
from typing import Iterable

from .config import SiteConfig, load_config
from .content import load_page, load_posts
from .errors import BuildError
from .indexes import build_indexes
from .pages import PageRenderer, Sink, directory_sink, generate_site
from .report import BuildReport

__all__ = ["build", "main"]


def _reset_output(output_dir: pathlib.Path) -> None:
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)


def _copy_public(public_dir: pathlib.Path, output_dir: pathlib.Path) -> None:
    if public_dir.is_dir():
        shutil.copytree(public_dir, output_dir, dirs_exist_ok=True)


def build(
    config: SiteConfig,
    *,
    sink: Sink | None = None,
    current_year: int | None = None,
) -> BuildReport:
    """Run one build with ``config``.

    With the default sink pages are written below ``config.output_dir``,
    which is cleared first. A custom ``sink`` receives ``(route, html)``
    pairs instead and the filesystem is left untouched.
    """

    print("\nStarting blog build...\n")
    write_to_disk = sink is None
    if write_to_disk:
        _reset_output(config.output_dir)
        print("Copying static files...")
        _copy_public(config.public_dir, config.output_dir)
        sink = directory_sink(config.output_dir)

    print("Loading posts...")
    posts = load_posts(config)
    indexes = build_indexes(posts)

    report = BuildReport()
    report.posts_count = len(posts)
    report.categories_count = len(indexes.categories)
    report.tags_count = len(indexes.tags)
    print(f"   {len(posts)} posts found")
    print(f"   {len(indexes.categories)} categories")
    print(f"   {len(indexes.tags)} tags\n")

    print("Generating pages...")
    renderer = PageRenderer(config, sink, report=report, current_year=current_year)
    generate_site(posts, indexes, renderer, about=load_page(config, "about"))

    if write_to_disk:
        # GitHub Pages must not run Jekyll over the output
        (config.output_dir / ".nojekyll").write_text("", encoding="utf-8")

    print(f"\nBuild complete: {report.pages_generated} pages.\n")
    return report


def _parse_cli_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the static blog from markdown posts.")
    parser.add_argument("--config", type=pathlib.Path, default=None, help="Optional JSON config file.")
    parser.add_argument("--content-dir", type=pathlib.Path, default=None, help="Content root (default: content).")
    parser.add_argument("--templates-dir", type=pathlib.Path, default=None, help="Templates directory (default: templates).")
    parser.add_argument("--public-dir", type=pathlib.Path, default=None, help="Static files copied verbatim (default: public).")
    parser.add_argument("--output-dir", type=pathlib.Path, default=None, help="Build output (default: dist).")
    parser.add_argument("--posts-per-page", type=int, default=None, help="Split the blog listing; 0 keeps one page.")
    parser.add_argument("--site-title", default=None, help="Site title shown by the layout.")
    parser.add_argument("--site-description", default=None, help="Site description shown by the layout.")
    parser.add_argument("--base-url", default=None, help="Prefix when serving from a sub-path, e.g. /repo-name.")
    parser.add_argument(
        "--allow-invalid-dates",
        action="store_true",
        help="Keep posts with unparseable dates (sorted last) instead of failing.",
    )
    parser.add_argument("--report", type=pathlib.Path, default=None, help="Write a JSON build report to this path.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_cli_args(argv)
    overrides = {
        "content_dir": args.content_dir,
        "templates_dir": args.templates_dir,
        "public_dir": args.public_dir,
        "output_dir": args.output_dir,
        "posts_per_page": args.posts_per_page,
        "site_title": args.site_title,
        "site_description": args.site_description,
        "base_url": args.base_url,
        "strict_dates": False if args.allow_invalid_dates else None,
    }

    try:
        config = load_config(args.config, overrides)
        report = build(config)
    except BuildError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.report is not None:
        report.write(args.report)
        print(f"Wrote build report to {args.report}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
