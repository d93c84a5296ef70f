"""File storage for wiki pages."""

import logging
import posixpath
from pathlib import Path

logger = logging.getLogger(__name__)


def write_file(data: bytes, path: Path) -> None:
    """Write ``data`` to ``path``, creating parent directories as needed.

    Raises:
        OSError: If the directories or the file cannot be written.
    """
    path.parent.mkdir(mode=0o777, parents=True, exist_ok=True)
    path.write_bytes(data)


class FileStorage:
    """Markdown files under a root directory.

    URL path ``/a/b`` is stored as ``<root>/a/b.md``. The root page and
    paths ending in a slash map to ``index.md`` in that directory.
    """

    SUFFIX = ".md"
    INDEX = "index"

    def __init__(self, base_path: Path):
        self.base_path = base_path

    def relative_path(self, url_path: str) -> str:
        """Get the page file path relative to the root, posix style."""
        normalized = posixpath.normpath("/" + url_path.lstrip("/"))
        name = normalized.lstrip("/")
        if not name or url_path.endswith("/"):
            name = posixpath.join(name, self.INDEX)
        return name + self.SUFFIX

    def get_path(self, url_path: str) -> Path:
        """Get the full filesystem path for a page."""
        return self.base_path / self.relative_path(url_path)

    def write_page(self, url_path: str, data: bytes) -> Path:
        """Write a page and return the path written to.

        Raises:
            OSError: If writing fails.
        """
        path = self.get_path(url_path)
        write_file(data, path)
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path
