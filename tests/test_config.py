from aurora_store.config import ExecutorKind, Settings, get_settings, reset_settings_cache
from aurora_store.store import AuroraPostgresStore

from helpers import RecordingExecutor


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("AURORA_RESOURCE_ARN", "cluster-123")
    monkeypatch.setenv("AURORA_SECRET_ARN", "secret-123")
    monkeypatch.setenv("AURORA_DATABASE", "product")
    monkeypatch.setenv("STORE_EXECUTOR", "postgres")
    monkeypatch.setenv("STORE_KEY_LENGTH", "128")

    settings = Settings.from_env()

    assert settings.resource_arn == "cluster-123"
    assert settings.secret_arn == "secret-123"
    assert settings.database == "product"
    assert settings.executor == ExecutorKind.POSTGRES
    assert settings.key_length == 128


def test_get_settings_is_cached_until_reset(monkeypatch):
    monkeypatch.setenv("AURORA_DATABASE", "first")
    first = get_settings()
    monkeypatch.setenv("AURORA_DATABASE", "second")
    assert get_settings() is first

    reset_settings_cache()
    assert get_settings().database == "second"


async def test_store_from_settings():
    executor = RecordingExecutor()
    settings = Settings(
        resource_arn="cluster-123",
        secret_arn="secret-123",
        database="product",
        key_length=36,
    )
    store = AuroraPostgresStore.from_settings(
        settings, table="users", get_item_key=lambda user: user["id"], executor=executor
    )

    await store.setup()

    assert executor.last == {
        "resourceArn": "cluster-123",
        "secretArn": "secret-123",
        "database": "product",
        "sql": 'CREATE TABLE "users" ("key" varchar(36) PRIMARY KEY, "item" jsonb)',
    }


async def test_store_from_settings_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("AURORA_RESOURCE_ARN", "cluster-env")
    monkeypatch.setenv("AURORA_SECRET_ARN", "secret-env")
    monkeypatch.setenv("AURORA_DATABASE", "envdb")
    executor = RecordingExecutor()

    store = AuroraPostgresStore.from_settings(
        table="users", get_item_key=lambda user: user["id"], executor=executor
    )
    await store.clear()

    assert executor.last == {
        "resourceArn": "cluster-env",
        "secretArn": "secret-env",
        "database": "envdb",
        "sql": 'DELETE FROM "users"',
    }
