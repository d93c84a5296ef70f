"""Request orchestration: save, revert, view and edit pages."""

import logging
from dataclasses import dataclass

from gwiki.config import Settings
from gwiki.core.models import Node, list_directories
from gwiki.core.parser import render_markdown
from gwiki.core.revisions import RevisionError, RevisionProvider
from gwiki.core.storage import FileStorage

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}

REVERT_MESSAGE = "Reverted to: {revision}"


def parse_bool(value: str | None) -> bool:
    """Parse a boolean-ish form value; anything unrecognised is false."""
    return value in TRUE_VALUES


@dataclass
class WikiRequest:
    """Parameters of one wiki request."""

    path: str
    content: str = ""
    msg: str = ""
    author: str = ""
    revert: str = ""
    revision: str = ""
    edit: str = ""
    revisions: str = ""
    cookie_author: str = ""

    @classmethod
    def from_params(cls, path: str, params: dict, cookie_author: str = "") -> "WikiRequest":
        """Build a request from merged query and form parameters."""
        fields = ("content", "msg", "author", "revert", "revision", "edit", "revisions")
        return cls(
            path=path,
            cookie_author=cookie_author,
            **{name: params.get(name) or "" for name in fields},
        )


class Wiki:
    """Drives storage, history and rendering for a single page request."""

    def __init__(
        self,
        settings: Settings,
        storage: FileStorage,
        revisions: RevisionProvider,
    ):
        self.settings = settings
        self.storage = storage
        self.revisions = revisions

    def handle(self, request: WikiRequest) -> Node:
        """Process a request and return the page to render."""
        node = Node(
            title=self.settings.app_title,
            path=request.path,
            file=self.storage.relative_path(request.path),
            edit=parse_bool(request.edit),
            revisions=parse_bool(request.revisions),
            author=request.cookie_author,
            dirs=list_directories(request.path),
        )

        if request.content and request.msg and request.author:
            node.author = request.author
            if self._save(node, request):
                return node
        elif request.revert:
            if request.author:
                node.author = request.author
            self._revert(node, request.revert)
            return node

        self._view(node, request.revision)
        return node

    def _save(self, node: Node, request: WikiRequest) -> bool:
        data = request.content.encode("utf-8")
        try:
            self.storage.write_page(node.path, data)
        except OSError as e:
            logger.error("Can't write to file %r, error: %s", node.file, e)
            return False

        node.raw = data
        try:
            self.revisions.add(node.file)
            self.revisions.commit(node.file, request.msg, request.author)
        except RevisionError as e:
            logger.warning("Couldn't commit %r: %s", node.file, e)
        node.log = self.revisions.log(node.file, self.settings.log_limit)
        node.markdown = render_markdown(node.raw)
        return True

    def _revert(self, node: Node, revision: str) -> None:
        try:
            self.revisions.revert(node.file, revision)
            self.revisions.commit(
                node.file, REVERT_MESSAGE.format(revision=revision), node.author
            )
        except RevisionError as e:
            logger.warning("Couldn't revert %r to %s: %s", node.file, revision, e)
        node.raw = self._show(node.file, "")
        node.log = self.revisions.log(node.file, self.settings.log_limit)
        node.markdown = render_markdown(node.raw)

    def _view(self, node: Node, revision: str) -> None:
        node.revision = revision
        node.raw = self._show(node.file, revision)
        node.log = self.revisions.log(node.file, self.settings.log_limit)

        create_new = not node.raw
        node.edit = node.edit or create_new

        if create_new:
            node.changelog = f"Create {node.page_name}"
        else:
            node.changelog = f"Edit {node.page_name}"

        if node.edit:
            node.content = node.raw.decode("utf-8", errors="replace")
            node.template = "edit"
        else:
            node.markdown = render_markdown(node.raw)

    def _show(self, file: str, revision: str) -> bytes:
        try:
            return self.revisions.show(file, revision)
        except (RevisionError, OSError) as e:
            logger.warning("Couldn't show %r at %r: %s", file, revision, e)
            return b""
