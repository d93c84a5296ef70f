"""Markdown rendering with safe HTML output."""

from xml.etree.ElementTree import Element

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor


# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"

UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:")
URL_ATTRIBUTES = ("href", "src")


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


class SafeLinkTreeprocessor(Treeprocessor):
    """Drop link and image URLs that would execute script."""

    def run(self, root: Element) -> None:
        for el in root.iter():
            for attr in URL_ATTRIBUTES:
                value = el.get(attr)
                if value is None:
                    continue
                scheme = "".join(value.split()).lower()
                if scheme.startswith(UNSAFE_SCHEMES):
                    del el.attrib[attr]


class SafeHtmlExtension(Extension):
    """Escape raw HTML in the source instead of passing it through."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Remove raw HTML handling and register the link filter."""
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
        md.treeprocessors.register(SafeLinkTreeprocessor(md), "safe_links", 0)


def create_parser() -> Markdown:
    """Create a Markdown parser producing sanitized HTML fragments.

    Returns:
        Configured Markdown parser instance.
    """
    return Markdown(
        extensions=[
            # Core formatting
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",  # Better list handling
            "smarty",  # Smart quotes and dashes
            "toc",  # Heading ids
            # PyMdown extensions
            "pymdownx.magiclink",  # Bare URLs become links
            "pymdownx.tasklist",  # Task lists with checkboxes
            # Custom extensions
            StrikethroughExtension(),  # ~~strikethrough~~
            SafeHtmlExtension(),  # Must come after "extra" (md_in_html)
        ]
    )


def render_markdown(data: bytes | str) -> str:
    """Render page content to an HTML fragment.

    Args:
        data: Raw page bytes (UTF-8) or text.

    Returns:
        HTML string. Embedded HTML is escaped, never executed.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    return create_parser().convert(data)
