"""Group the sorted posts into category, tag and archive buckets."""

from __future__ import annotations

import dataclasses
from typing import Sequence

from .content import Post

__all__ = ["ArchiveBucket", "Indexes", "build_indexes"]


@dataclasses.dataclass(slots=True)
class ArchiveBucket:
    """Posts published in one ``year``/``month``."""

    year: str
    month: str
    posts: list[Post] = dataclasses.field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month}"


@dataclasses.dataclass(slots=True)
class Indexes:
    categories: dict[str, list[Post]]
    tags: dict[str, list[Post]]
    archives: dict[str, ArchiveBucket]

    def sorted_archives(self) -> list[ArchiveBucket]:
        """Archive buckets, most recent month first."""

        return sorted(self.archives.values(), key=lambda bucket: bucket.key, reverse=True)


def build_indexes(posts: Sequence[Post]) -> Indexes:
    """Bucket ``posts`` in one pass.

    ``posts`` must already be sorted newest first; each bucket keeps that
    order and buckets appear in first-seen order.
    """

    categories: dict[str, list[Post]] = {}
    tags: dict[str, list[Post]] = {}
    archives: dict[str, ArchiveBucket] = {}

    for post in posts:
        categories.setdefault(post.category, []).append(post)

        for tag in post.tags:
            tags.setdefault(tag, []).append(post)

        bucket = archives.get(post.archive_key)
        if bucket is None:
            bucket = archives[post.archive_key] = ArchiveBucket(year=post.year, month=post.month)
        bucket.posts.append(post)

    return Indexes(categories=categories, tags=tags, archives=archives)
