"""g-wiki: a small Markdown wiki with git-backed history."""

__version__ = "0.1.0"
