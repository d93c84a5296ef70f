"""Revision history for wiki pages.

The request handler only talks to :class:`RevisionProvider`. The default
implementation shells out to the ``git`` command line tool inside the
content directory.
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from gwiki.core.models import Revision

logger = logging.getLogger(__name__)

# Field separator for ``git log`` output, cannot appear in commit subjects.
LOG_SEPARATOR = "\x1f"


class RevisionError(Exception):
    """Raised when the version control backend fails."""


class RevisionProvider(ABC):
    """Abstract base class for page history backends.

    All paths are page files relative to the content root.
    """

    @abstractmethod
    def add(self, file: str) -> None:
        """Stage a file."""
        ...

    @abstractmethod
    def commit(self, file: str, message: str, author: str = "") -> None:
        """Commit the staged changes of a file."""
        ...

    @abstractmethod
    def show(self, file: str, revision: str = "") -> bytes:
        """Get file content at a revision, or the working copy if empty."""
        ...

    @abstractmethod
    def log(self, file: str, limit: int) -> list[Revision]:
        """Get at most ``limit`` revisions of a file, newest first."""
        ...

    @abstractmethod
    def revert(self, file: str, revision: str) -> None:
        """Restore the working copy of a file to a revision, without committing."""
        ...


class GitRevisions(RevisionProvider):
    """Revision provider backed by the ``git`` executable."""

    def __init__(
        self,
        root: Path,
        git_binary: str = "git",
        email: str = "system@g-wiki",
        committer: str = "g-wiki",
    ):
        self.root = root
        self.git_binary = git_binary
        self.email = email
        self.committer = committer

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.setdefault("GIT_COMMITTER_NAME", self.committer)
        env.setdefault("GIT_COMMITTER_EMAIL", self.email)
        env.setdefault("GIT_AUTHOR_NAME", self.committer)
        env.setdefault("GIT_AUTHOR_EMAIL", self.email)
        return env

    def _run(self, *args: str) -> bytes:
        """Run a git command in the content root and return its stdout.

        Raises:
            RevisionError: If git is missing or exits non-zero.
        """
        cmd = [self.git_binary, *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                env=self._env(),
                capture_output=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip()
            raise RevisionError(f"git {args[0]} failed: {stderr}") from e
        except OSError as e:
            raise RevisionError(f"Cannot run {self.git_binary}: {e}") from e
        return result.stdout

    def is_repository(self) -> bool:
        """Check whether the content root is inside a git work tree."""
        try:
            out = self._run("rev-parse", "--is-inside-work-tree")
        except RevisionError:
            return False
        return out.strip() == b"true"

    def init(self) -> None:
        """Create the content root and a repository in it if missing."""
        self.root.mkdir(parents=True, exist_ok=True)
        if self.is_repository():
            return
        self._run("init")
        logger.info("Initialized git repository in %s", self.root)

    def add(self, file: str) -> None:
        self._run("add", "--", file)

    def commit(self, file: str, message: str, author: str = "") -> None:
        args = ["commit", "-m", message]
        if author:
            args.append(f"--author={author} <{self.email}>")
        self._run(*args, "--", file)
        logger.info("Committed %s: %s", file, message)

    def show(self, file: str, revision: str = "") -> bytes:
        if not revision:
            path = self.root / file
            if not path.is_file():
                return b""
            return path.read_bytes()
        check_revision(revision)
        return self._run("show", f"{revision}:./{file}")

    def log(self, file: str, limit: int) -> list[Revision]:
        fmt = LOG_SEPARATOR.join(["%H", "%s", "%ad"])
        try:
            out = self._run(
                "log",
                f"-n{limit}",
                "--date=iso",
                f"--pretty=format:{fmt}",
                "--",
                file,
            )
        except RevisionError:
            # No commits yet in a fresh repository
            logger.debug("No history for %s", file)
            return []
        return parse_log(out.decode("utf-8", errors="replace"))

    def revert(self, file: str, revision: str) -> None:
        check_revision(revision)
        self._run("checkout", revision, "--", file)


def check_revision(revision: str) -> None:
    """Reject revisions git would parse as a command line option.

    Raises:
        RevisionError: If the revision starts with a dash.
    """
    if revision.startswith("-"):
        raise RevisionError(f"Invalid revision {revision!r}")


def parse_log(output: str) -> list[Revision]:
    """Parse ``hash<US>subject<US>date`` lines into revisions.

    Every entry but the first (newest) is rendered as a link.
    """
    revisions = []
    for line in output.splitlines():
        parts = line.split(LOG_SEPARATOR)
        if len(parts) != 3:
            continue
        hash_, message, time = parts
        revisions.append(
            Revision(hash=hash_, message=message, time=time, link=bool(revisions))
        )
    return revisions
