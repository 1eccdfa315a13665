"""Summary of a build run, optionally persisted as a JSON heartbeat."""

from __future__ import annotations

import datetime as _dt
import json
import pathlib

__all__ = ["BuildReport"]


def _utc_now_iso() -> str:
    """Return a second-precision UTC timestamp with a ``Z`` suffix."""

    now = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None)
    return now.isoformat() + "Z"


class BuildReport:
    """Accumulate generated routes and skipped pages for one build."""

    def __init__(self) -> None:
        self.routes: list[str] = []
        self.skipped: list[str] = []
        self.posts_count = 0
        self.categories_count = 0
        self.tags_count = 0

    def record_page(self, route: str) -> None:
        self.routes.append(route)

    def record_skip(self, name: str) -> None:
        text = str(name or "").strip()
        if text and text not in self.skipped:
            self.skipped.append(text)

    @property
    def pages_generated(self) -> int:
        return len(self.routes)

    def as_dict(self) -> dict[str, object]:
        return {
            "last_build": _utc_now_iso(),
            "posts_count": self.posts_count,
            "categories_count": self.categories_count,
            "tags_count": self.tags_count,
            "pages_generated": self.pages_generated,
            "routes": list(self.routes),
            "skipped": list(self.skipped),
        }

    def write(self, path: pathlib.Path) -> pathlib.Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.as_dict(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        return path
