"""Shared fixtures for g-wiki tests."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gwiki.config import Settings
from gwiki.core.revisions import GitRevisions
from gwiki.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "files", log_limit=5, app_title="TestWiki")


@pytest.fixture
def git(settings):
    revisions = GitRevisions(settings.data_dir)
    revisions.init()
    return revisions


@pytest.fixture
def wiki_app(settings):
    """A fresh app pointing at a temp content directory."""
    return create_app(settings)


@pytest_asyncio.fixture
async def client(wiki_app):
    transport = ASGITransport(app=wiki_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
