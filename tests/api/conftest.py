from __future__ import annotations

import pytest

from chatstore import create_app


@pytest.fixture
def app(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("CHATSTORE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("CHATSTORE_DB_PATH", raising=False)
    monkeypatch.delenv("LOG_DIR", raising=False)
    application = create_app()
    application.config["TESTING"] = True
    yield application
    application.config["CHAT_STATE_DB"].close()


@pytest.fixture
def client(app):
    return app.test_client()
