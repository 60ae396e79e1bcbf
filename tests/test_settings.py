import logging

import pytest

from todo_api.db import SQLiteRepository
from todo_api.logging_config import setup_logging
from todo_api.repositories import InMemoryRepository, get_repository
from todo_api.settings import get_settings


@pytest.fixture
def clean_repository_cache():
    get_repository.cache_clear()
    yield
    get_repository.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "LOG_LEVEL", "LOG_FILE"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.sqlite_db_path == "./data/todos.db"
        assert settings.cors_allow_origins == ["*"]
        assert settings.log_level == "INFO"
        assert settings.log_file is None

    def test_unknown_backend_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
        assert get_settings().persistence_backend == "memory"

    def test_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        assert get_settings().cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_log_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FILE", str(tmp_path / "todo.log"))
        settings = get_settings()
        assert settings.log_level == "DEBUG"
        assert settings.log_file == str(tmp_path / "todo.log")


class TestGetRepository:
    def test_memory_backend(self, monkeypatch, clean_repository_cache):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "memory")
        repo = get_repository()
        assert isinstance(repo, InMemoryRepository)
        # One store per process
        assert get_repository() is repo

    def test_sqlite_backend(self, monkeypatch, tmp_path, clean_repository_cache):
        db_path = tmp_path / "nested" / "todos.db"
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(db_path))
        repo = get_repository()
        assert isinstance(repo, SQLiteRepository)
        assert db_path.exists()


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path):
        root = logging.getLogger()
        saved, saved_level = root.handlers[:], root.level
        root.handlers.clear()
        log_file = tmp_path / "logs" / "todo.log"
        try:
            setup_logging("INFO", str(log_file))
            logging.getLogger("todo_api.test").info("hello from the test")
            for handler in root.handlers:
                handler.flush()
            assert "hello from the test" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved
            root.setLevel(saved_level)
