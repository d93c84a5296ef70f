"""Data models for g-wiki."""

from pydantic import BaseModel, Field

# Shortest abbreviation git accepts for a commit hash
MIN_HASH_LENGTH = 4
SHORT_HASH_LENGTH = 7


class Directory(BaseModel):
    """A breadcrumb segment of the current page path."""

    path: str
    name: str
    active: bool = False


class Revision(BaseModel):
    """One entry of a page's history, newest first."""

    hash: str
    message: str
    time: str
    link: bool = True

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]


class Node(BaseModel):
    """Represents a wiki page for the duration of one request."""

    title: str
    path: str
    file: str
    raw: bytes = b""
    content: str = ""
    markdown: str = ""
    template: str = ""
    revision: str = ""
    dirs: list[Directory] = Field(default_factory=list)
    log: list[Revision] = Field(default_factory=list)

    edit: bool = False
    revisions: bool = False
    author: str = ""
    changelog: str = ""

    @property
    def is_head(self) -> bool:
        """True when the requested revision is the newest one in the log.

        Abbreviated hashes match the full hash they are a prefix of.
        """
        if not self.log or not self.revision:
            return False
        head = self.log[0].hash
        if self.revision == head:
            return True
        return len(self.revision) >= MIN_HASH_LENGTH and head.startswith(self.revision)

    @property
    def page_name(self) -> str:
        """Path without the leading slash, used in changelog messages."""
        return self.path.lstrip("/") or "index page"


def list_directories(path: str) -> list[Directory]:
    """Split a URL path into breadcrumbs, the last one marked active."""
    segments = [s for s in path.split("/") if s]
    dirs = []
    for i, name in enumerate(segments):
        dirs.append(
            Directory(
                path="/" + "/".join(segments[: i + 1]),
                name=name,
                active=i == len(segments) - 1,
            )
        )
    return dirs
