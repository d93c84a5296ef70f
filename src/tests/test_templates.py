"""Unit tests for fragment composition."""

import logging

import pytest

from gwiki.core.models import Node, Revision, list_directories
from gwiki.core.templates import (
    FragmentRegistry,
    TemplateBundleError,
    fragments_for,
)
from gwiki.main import templates_path

LOG = [
    Revision(hash="ccc", message="third", time="2024-01-03", link=False),
    Revision(hash="bbb", message="second", time="2024-01-02"),
    Revision(hash="aaa", message="first", time="2024-01-01"),
]


def make_node(**kwargs):
    defaults = {"title": "TestWiki", "path": "/page", "file": "page.md"}
    defaults.update(kwargs)
    return Node(**defaults)


@pytest.fixture
def registry():
    return FragmentRegistry(templates_path)


# ============================================================
# Fragment order
# ============================================================


class TestFragmentsFor:
    def test_rendered_mode(self):
        node = make_node(markdown="<p>x</p>")
        assert fragments_for(node) == ["header", "node", "footer"]

    def test_rendered_with_revisions(self):
        node = make_node(markdown="<p>x</p>", revisions=True, log=LOG)
        assert fragments_for(node) == ["header", "revisions", "node", "footer"]

    def test_historical_revision_shows_banner(self):
        node = make_node(markdown="<p>x</p>", revision="aaa", log=LOG)
        assert fragments_for(node) == ["header", "revision", "node", "footer"]

    def test_head_revision_has_no_banner(self):
        node = make_node(markdown="<p>x</p>", revision="ccc", log=LOG)
        assert "revision" not in fragments_for(node)

    def test_banner_after_revision_list(self):
        node = make_node(markdown="<p>x</p>", revision="bbb", revisions=True, log=LOG)
        assert fragments_for(node) == [
            "header",
            "revisions",
            "revision",
            "node",
            "footer",
        ]

    def test_template_mode(self):
        node = make_node(content="raw", template="edit")
        assert fragments_for(node) == ["header", "edit", "footer"]

    def test_template_mode_never_shows_node(self):
        node = make_node(content="raw", template="edit", revision="aaa", log=LOG)
        assert "node" not in fragments_for(node)
        assert "revision" not in fragments_for(node)


# ============================================================
# Rendering
# ============================================================


class TestCompose:
    def test_view_page(self, registry):
        node = make_node(markdown="<h1>Hello</h1>", log=LOG)
        html = registry.compose(node)
        assert html.startswith("<!DOCTYPE html>")
        assert "<h1>Hello</h1>" in html
        assert "TestWiki" in html
        assert html.rstrip().endswith("</html>")

    def test_edit_page_escapes_content(self, registry):
        node = make_node(
            content="</textarea><script>x</script>",
            template="edit",
            changelog="Create page",
            author="alice",
        )
        html = registry.compose(node)
        assert "<textarea" in html
        assert "&lt;/textarea&gt;&lt;script&gt;" in html
        assert 'value="Create page"' in html
        assert 'value="alice"' in html

    def test_revision_list_links(self, registry):
        node = make_node(markdown="<p>x</p>", revisions=True, log=LOG)
        html = registry.compose(node)
        assert "?revision=bbb" in html
        assert "?revision=aaa" in html
        assert "?revision=ccc" not in html
        assert "third" in html

    def test_revision_list_shows_short_hash(self, registry):
        full = "3f2a9c1d0b8e7a6f5c4d3e2f1a0b9c8d7e6f5a4b"
        log = [
            Revision(hash="a" * 40, message="new", time="t", link=False),
            Revision(hash=full, message="old", time="t"),
        ]
        html = registry.compose(make_node(markdown="<p>x</p>", revisions=True, log=log))
        assert f"?revision={full}" in html
        assert ">3f2a9c1</a>" in html

    def test_revision_banner(self, registry):
        node = make_node(markdown="<p>old</p>", revision="aaa", log=LOG)
        html = registry.compose(node)
        assert "revision-banner" in html
        assert 'name="revert" value="aaa"' in html

    def test_breadcrumbs(self, registry):
        node = make_node(path="/a/b", markdown="<p>x</p>", dirs=list_directories("/a/b"))
        html = registry.compose(node)
        assert 'href="/a"' in html
        assert "<strong>b</strong>" in html


# ============================================================
# Failure handling
# ============================================================


class TestDegradedFragments:
    def test_missing_fragment_renders_empty(self, tmp_path, caplog):
        (tmp_path / "header.html").write_text("<header>{{ node.title }}</header>")
        (tmp_path / "node.html").write_text("{{ node.markdown | safe }}")
        registry = FragmentRegistry(tmp_path)
        with caplog.at_level(logging.ERROR):
            html = registry.compose(make_node(markdown="<p>body</p>"))
        assert html == "<header>TestWiki</header><p>body</p>"
        assert "footer" in caplog.text

    def test_broken_fragment_renders_empty(self, tmp_path):
        (tmp_path / "header.html").write_text("{% if %}")
        (tmp_path / "node.html").write_text("{{ node.markdown | safe }}")
        (tmp_path / "footer.html").write_text("<footer></footer>")
        registry = FragmentRegistry(tmp_path)
        html = registry.compose(make_node(markdown="<p>body</p>"))
        assert html == "<p>body</p><footer></footer>"

    def test_check_missing_bundle(self, tmp_path):
        registry = FragmentRegistry(tmp_path / "nope")
        with pytest.raises(TemplateBundleError):
            registry.check()

    def test_check_bundled_templates(self, registry):
        registry.check()
