"""
Pytest configuration and shared fixtures for Prompt Forms tests.
"""

import pytest
from fastapi.testclient import TestClient

from promptforms.api.main import create_app
from promptforms.config import Settings
from promptforms.forms.executor import FormExecutor
from promptforms.llm.dispatcher import Provider, ProviderDispatcher
from promptforms.store import db


class FakeBackend:
    """TextBackend stand-in that records every call."""

    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate(self, model: str, prompt: str, credential: str) -> str:
        self.calls.append({"model": model, "prompt": prompt, "credential": credential})
        if self.error is not None:
            raise self.error
        return self.text


# ============================================
# Configuration
# ============================================

@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test SQLite file, no default credential."""
    return Settings(sqlite_path=str(tmp_path / "forms.db"))


@pytest.fixture
def store_db(settings):
    """Initialized per-test SQLite database."""
    db.configure(settings.database_url, settings.sqlite_path)
    db.init_db()
    yield settings.sqlite_path
    db.configure("")


# ============================================
# Backends and dispatch
# ============================================

@pytest.fixture
def fake_backends():
    return {
        Provider.GEMINI: FakeBackend(text="gemini says hi"),
        Provider.OPENAI: FakeBackend(text="openai says hi"),
        Provider.DEEPSEEK: FakeBackend(text="deepseek says hi"),
    }


@pytest.fixture
def make_backend():
    """Factory for standalone fake backends."""
    return FakeBackend


@pytest.fixture
def dispatcher(settings, fake_backends):
    return ProviderDispatcher(settings, backends=fake_backends)


@pytest.fixture
def client(settings, fake_backends):
    """TestClient running the app lifespan against the per-test database."""
    executor = FormExecutor(ProviderDispatcher(settings, backends=fake_backends))
    app = create_app(settings, executor=executor)
    with TestClient(app) as test_client:
        yield test_client
    db.configure("")
