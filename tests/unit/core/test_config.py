"""Tests for settings helpers."""

import pytest

from claimflow.core.config import DatabaseSettings, Settings


class TestConnectionUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("postgres://u:p@db:5432/claims", "postgresql+asyncpg://u:p@db:5432/claims"),
            ("postgresql://u:p@db/claims", "postgresql+asyncpg://u:p@db/claims"),
            (
                "postgresql://u:p@db/claims?sslmode=require",
                "postgresql+asyncpg://u:p@db/claims?ssl=require",
            ),
            ("postgresql+asyncpg://u:p@db/claims", "postgresql+asyncpg://u:p@db/claims"),
            ("sqlite+aiosqlite:///./claims.db", "sqlite+aiosqlite:///./claims.db"),
        ],
    )
    def test_driver_prefix(self, raw, expected) -> None:
        assert DatabaseSettings(DATABASE_URL=raw).connection_url == expected


def test_nested_groups_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_PREFIX", "/v2")
    monkeypatch.setenv("UPLOAD_DIR", "/srv/claim-files")
    monkeypatch.setenv("JWT_EXPIRE_MINUTES", "15")

    settings = Settings()

    assert settings.api_prefix == "/v2"
    assert settings.upload_dir == "/srv/claim-files"
    assert settings.auth.token_expire_minutes == 15
    assert settings.jwt_algorithm == "HS256"
