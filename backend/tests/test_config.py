from pathlib import Path

import pytest

from stocklocator.core.config import ConfigurationError, Settings, normalize_shop

ENV_VARS = (
    "SHOPIFY_SHOP",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_API_VERSION",
    "PORT",
    "SHOPIFY_TIMEOUT_SECONDS",
    "LOOKUP_PAGE_SIZE",
    "METRICS_ENABLED",
    "OTEL_ENABLED",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values a .env file loads
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # keep any developer .env out of the picture
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_from_env_requires_shop_and_token(clean_env, tmp_path):
    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env(tmp_path / "missing.env")

    assert exc.value.missing == ["SHOPIFY_SHOP", "SHOPIFY_ACCESS_TOKEN"]
    assert "SHOPIFY_SHOP" in str(exc.value)


def test_from_env_reports_only_missing_token(clean_env, tmp_path):
    clean_env.setenv("SHOPIFY_SHOP", "demo.myshopify.com")

    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env(tmp_path / "missing.env")
    assert exc.value.missing == ["SHOPIFY_ACCESS_TOKEN"]


def test_from_env_defaults(clean_env, tmp_path):
    clean_env.setenv("SHOPIFY_SHOP", "demo.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")

    s = Settings.from_env(tmp_path / "missing.env")

    assert s.shopify_api_version == "2024-07"
    assert s.port == 3000
    assert s.static_dir == Path("public")
    assert s.metrics_enabled is True
    assert s.graphql_endpoint == "https://demo.myshopify.com/admin/api/2024-07/graphql.json"


def test_from_env_overrides(clean_env, tmp_path):
    clean_env.setenv("SHOPIFY_SHOP", "demo.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")
    clean_env.setenv("SHOPIFY_API_VERSION", "2025-01")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("OTEL_ENABLED", "false")

    s = Settings.from_env(tmp_path / "missing.env")

    assert s.port == 8080
    assert s.otel_enabled is False
    assert s.graphql_endpoint.endswith("/admin/api/2025-01/graphql.json")


def test_from_env_reads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SHOPIFY_SHOP=file-store.myshopify.com\nSHOPIFY_ACCESS_TOKEN=shpat_file\n")

    s = Settings.from_env(env_file)

    assert s.shopify_shop == "file-store.myshopify.com"
    assert s.shopify_access_token == "shpat_file"


@pytest.mark.parametrize(
    "raw",
    ["demo.myshopify.com", "https://demo.myshopify.com", "https://demo.myshopify.com/", " demo.myshopify.com "],
)
def test_normalize_shop(raw):
    assert normalize_shop(raw) == "demo.myshopify.com"


def test_run_exits_when_config_missing(clean_env):
    from stocklocator import main

    with pytest.raises(SystemExit) as exc:
        main.run()
    assert exc.value.code == 1


@pytest.mark.parametrize("name", ["PORT", "SHOPIFY_TIMEOUT_SECONDS", "LOOKUP_PAGE_SIZE"])
def test_from_env_rejects_non_numeric_values(clean_env, tmp_path, name):
    clean_env.setenv("SHOPIFY_SHOP", "demo.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")
    clean_env.setenv(name, "abc")

    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env(tmp_path / "missing.env")
    assert str(exc.value) == f"{name} must be a number, got 'abc'."


def test_run_exits_on_malformed_port(clean_env, caplog):
    from stocklocator import main

    clean_env.setenv("SHOPIFY_SHOP", "demo.myshopify.com")
    clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")
    clean_env.setenv("PORT", "abc")

    with pytest.raises(SystemExit) as exc:
        main.run()
    assert exc.value.code == 1
    assert "PORT must be a number" in caplog.text
