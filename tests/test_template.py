import pathlib
import tempfile
import unittest

import pytest

from blogsmith import template
from blogsmith.errors import TemplateNotFoundError


def test_each_renders_every_item():
    out = template.render(
        "{{#each items}}<li>{{name}}</li>{{/each}}",
        {"items": [{"name": "a"}, {"name": "b"}]},
    )
    assert out == "<li>a</li><li>b</li>"


def test_if_keeps_or_drops_body():
    assert template.render("{{#if show}}X{{/if}}", {"show": False}) == ""
    assert template.render("{{#if show}}X{{/if}}", {"show": True}) == "X"
    assert template.render("{{#if show}}X{{/if}}", {}) == ""


def test_unknown_variable_passes_through():
    assert template.render("{{unknown}}", {}) == "{{unknown}}"
    assert template.render("{{missing}}", {"missing": None}) == "{{missing}}"


@pytest.mark.parametrize("value", [None, "text", {"name": "a"}, 3])
def test_each_over_non_sequence_is_empty(value):
    assert template.render("[{{#each items}}{{name}}{{/each}}]", {"items": value}) == "[]"


def test_each_leaves_none_properties_for_later_passes():
    out = template.render(
        "{{#each items}}{{name}}/{{title}};{{/each}}",
        {"items": [{"name": None, "title": "t"}], "name": "outer"},
    )
    assert out == "outer/t;"


def test_each_substitutes_scalars_only():
    out = template.render(
        "{{#each items}}{{name}} {{tags}} {{draft}} {{count}}{{/each}}",
        {"items": [{"name": "a", "tags": ["x", "y"], "draft": False, "count": 2}]},
    )
    assert out == "a {{tags}} false 2"


def test_each_with_non_mapping_items_repeats_body():
    assert template.render("{{#each items}}*{{/each}}", {"items": [1, 2, 3]}) == "***"


def test_nested_each_is_not_a_loop():
    out = template.render(
        "{{#each a}}[{{#each b}}{{x}}{{/each}}]{{/each}}",
        {"a": [{"x": "1"}], "b": [{"x": "2"}]},
    )
    assert out == "[{{#each b}}1]{{/each}}"


def test_loop_output_is_seen_by_conditional_and_variable_passes():
    out = template.render(
        "{{#each items}}{{#if show}}{{name}}{{/if}}-{{basePath}}{{url}}|{{/each}}",
        {"items": [{"name": "a", "url": "x.html"}], "show": True, "basePath": "../"},
    )
    assert out == "a-../x.html|"


def test_variable_stringification():
    out = template.render(
        "{{flag}} {{year}} {{tags}} {{name}}",
        {"flag": True, "year": 2024, "tags": ["a", "b"], "name": "x"},
    )
    assert out == "true 2024 a,b x"


def test_markers_require_exact_syntax():
    text = "{{#each  items}}x{{/each}} {{ name }}"
    assert template.render(text, {"items": [{}], "name": "n"}) == text


def test_substituted_values_are_not_rescanned():
    assert template.render("{{a}}", {"a": "{{b}}", "b": "nope"}) == "{{b}}"


class TemplateLoaderTests(unittest.TestCase):
    def test_loads_and_caches_templates(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = pathlib.Path(tmpdir)
            (root / "home.html").write_text("<h1>{{title}}</h1>", encoding="utf-8")
            loader = template.TemplateLoader(root)

            self.assertEqual(loader.load("home"), "<h1>{{title}}</h1>")
            (root / "home.html").write_text("changed", encoding="utf-8")
            self.assertEqual(loader.load("home"), "<h1>{{title}}</h1>")

    def test_missing_template_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            loader = template.TemplateLoader(pathlib.Path(tmpdir))
            with self.assertRaises(TemplateNotFoundError) as ctx:
                loader.load("layout")
            self.assertIn("layout.html", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
