import json
import pathlib

import pytest

from blogsmith import build as build_module
from blogsmith import config as config_module
from blogsmith.config import SiteConfig
from blogsmith.errors import TemplateNotFoundError

EXAMPLE_DIR = pathlib.Path(__file__).resolve().parents[1] / "example"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in config_module.ENV_VARS.values():
        monkeypatch.delenv(name, raising=False)


def _example_config(output_dir: pathlib.Path, **changes) -> SiteConfig:
    return SiteConfig(
        content_dir=EXAMPLE_DIR / "content",
        templates_dir=EXAMPLE_DIR / "templates",
        public_dir=EXAMPLE_DIR / "public",
        output_dir=output_dir,
        site_title="Example Blog",
        **changes,
    )


def test_build_example_site(tmp_path, capsys):
    output_dir = tmp_path / "dist"
    output_dir.mkdir()
    (output_dir / "stale.html").write_text("old", encoding="utf-8")

    report = build_module.build(_example_config(output_dir), current_year=2024)

    expected = [
        "index.html",
        "about.html",
        "blog/index.html",
        "blog/2024/02/static-sites.html",
        "blog/2024/01/hello-world.html",
        "category/notes.html",
        "tag/python.html",
        "tag/web.html",
        "tag/intro.html",
        "archive/2024/02.html",
        "archive/2024/01.html",
    ]
    assert sorted(report.routes) == sorted(expected)
    for route in expected:
        assert (output_dir / route).is_file(), route
    assert not (output_dir / "stale.html").exists()
    assert (output_dir / "css" / "style.css").is_file()
    assert (output_dir / ".nojekyll").read_text(encoding="utf-8") == ""
    assert report.posts_count == 2

    out = capsys.readouterr().out
    assert "2 posts found" in out
    assert "Build complete: 11 pages." in out


def test_example_pages_link_relative_to_their_depth(tmp_path):
    output_dir = tmp_path / "dist"
    build_module.build(_example_config(output_dir), current_year=2024)

    post_html = (output_dir / "blog/2024/01/hello-world.html").read_text(encoding="utf-8")
    assert 'href="../../../css/style.css"' in post_html
    assert '<a href="../../../tag/python.html" class="tag">python</a>' in post_html
    assert 'href="../../../blog/2024/02/static-sites.html"' in post_html
    assert "<title>Hello, World! | Example Blog</title>" in post_html
    assert 'class="hljs"' in post_html
    assert "&copy; 2024 Example Blog" in post_html

    home_html = (output_dir / "index.html").read_text(encoding="utf-8")
    assert 'href="./css/style.css"' in home_html
    assert 'href="./blog/2024/02/static-sites.html"' in home_html

    tag_html = (output_dir / "tag/python.html").read_text(encoding="utf-8")
    assert tag_html.index("static-sites.html") < tag_html.index("hello-world.html")

    about_html = (output_dir / "about.html").read_text(encoding="utf-8")
    assert "This blog is built from plain markdown files." in about_html


def test_build_with_custom_sink_leaves_disk_alone(tmp_path):
    output_dir = tmp_path / "dist"
    written: dict[str, str] = {}

    report = build_module.build(
        _example_config(output_dir, posts_per_page=1),
        sink=lambda route, text: written.__setitem__(route, text),
    )

    assert not output_dir.exists()
    assert "blog/page/2.html" in written
    assert set(written) == set(report.routes)


def test_missing_template_aborts_build(tmp_path):
    config = _example_config(tmp_path / "dist").replace(templates_dir=tmp_path / "no-templates")
    with pytest.raises(TemplateNotFoundError):
        build_module.build(config)


def test_main_writes_report(tmp_path, capsys):
    output_dir = tmp_path / "dist"
    report_path = tmp_path / "_health" / "build.json"

    exit_code = build_module.main(
        [
            "--content-dir",
            str(EXAMPLE_DIR / "content"),
            "--templates-dir",
            str(EXAMPLE_DIR / "templates"),
            "--public-dir",
            str(EXAMPLE_DIR / "public"),
            "--output-dir",
            str(output_dir),
            "--site-title",
            "CLI Blog",
            "--report",
            str(report_path),
        ]
    )

    assert exit_code == 0
    assert "Wrote build report" in capsys.readouterr().out
    stored = json.loads(report_path.read_text(encoding="utf-8"))
    assert stored["posts_count"] == 2
    assert stored["pages_generated"] == 11
    assert stored["skipped"] == []
    assert "CLI Blog" in (output_dir / "index.html").read_text(encoding="utf-8")


def test_main_reports_build_errors(tmp_path, capsys):
    exit_code = build_module.main(
        [
            "--content-dir",
            str(EXAMPLE_DIR / "content"),
            "--templates-dir",
            str(tmp_path / "missing"),
            "--output-dir",
            str(tmp_path / "dist"),
        ]
    )

    assert exit_code == 1
    assert "ERROR: Template missing" in capsys.readouterr().err


def test_main_invalid_dates(tmp_path, capsys):
    content_dir = tmp_path / "content"
    post = content_dir / "posts" / "2024" / "05" / "undated.md"
    post.parent.mkdir(parents=True)
    post.write_text("---\ntitle: Undated\ndate: soon\n---\nBody\n", encoding="utf-8")
    args = [
        "--content-dir",
        str(content_dir),
        "--templates-dir",
        str(EXAMPLE_DIR / "templates"),
        "--output-dir",
        str(tmp_path / "dist"),
    ]

    assert build_module.main(args) == 1
    assert "undated.md" in capsys.readouterr().err

    assert build_module.main(args + ["--allow-invalid-dates"]) == 0
    assert (tmp_path / "dist" / "blog" / "2024" / "05" / "undated.html").is_file()
