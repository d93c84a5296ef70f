"""Page composition from named template fragments."""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from gwiki.core.models import Node

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIX = ".html"
FRAGMENTS = ("header", "footer", "node", "revision", "revisions", "edit")


class TemplateBundleError(Exception):
    """Raised when the fragment bundle cannot be found at startup."""


class FragmentRegistry:
    """Read-only registry of template fragments loaded by name.

    Compiled fragments are cached by the Jinja2 environment, so shared
    fragments such as the header are parsed once per process.
    """

    def __init__(self, directory: Path, context: dict | None = None):
        self.directory = directory
        self.env = Environment(
            loader=FileSystemLoader(str(directory)),
            autoescape=select_autoescape(["html"]),
            auto_reload=False,
        )
        self.env.globals.update(context or {})

    def check(self) -> None:
        """Verify the bundle directory exists.

        Raises:
            TemplateBundleError: If the directory is missing.
        """
        if not self.directory.is_dir():
            raise TemplateBundleError(f"Template directory {self.directory} not found")
        missing = [
            name
            for name in FRAGMENTS
            if not (self.directory / f"{name}{FRAGMENT_SUFFIX}").is_file()
        ]
        if missing:
            logger.warning("Missing template fragments: %s", ", ".join(missing))

    def render(self, name: str, node: Node) -> str:
        """Render one fragment, or an empty string if it cannot be loaded."""
        try:
            template = self.env.get_template(f"{name}{FRAGMENT_SUFFIX}")
            return template.render(node=node)
        except TemplateError as e:
            logger.error("Couldn't render template %r: %s", name, e)
            return ""

    def compose(self, node: Node) -> str:
        """Render the fragments of a page in order and join them."""
        return "".join(self.render(name, node) for name in fragments_for(node))


def fragments_for(node: Node) -> list[str]:
    """Get the ordered fragment names for a page.

    Pages with an explicit template (the edit form) render that fragment
    in place of the revision banner and the rendered node.
    """
    names = ["header"]
    if node.revisions:
        names.append("revisions")
    if node.template:
        names.append(node.template)
    else:
        if node.revision and not node.is_head:
            names.append("revision")
        names.append("node")
    names.append("footer")
    return names
