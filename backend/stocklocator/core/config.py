from pydantic import BaseModel
from pathlib import Path
from typing import Any, Callable, List, Optional
import os

from dotenv import find_dotenv, load_dotenv

REQUIRED_ENV = ("SHOPIFY_SHOP", "SHOPIFY_ACCESS_TOKEN")


class ConfigurationError(RuntimeError):
    """Raised when environment variables are missing or malformed."""

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = missing
        super().__init__(message or f"Set {' & '.join(missing)} in env.")


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _number(name: str, default: str, cast: Callable[[str], Any]) -> Any:
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError([], f"{name} must be a number, got {raw!r}.") from None


def normalize_shop(shop: str) -> str:
    shop = shop.strip()
    for prefix in ("https://", "http://"):
        if shop.startswith(prefix):
            shop = shop[len(prefix):]
    return shop.rstrip("/")


class Settings(BaseModel):
    env: str = "development"
    project_name: str = "Stock Locator"

    shopify_shop: str
    shopify_access_token: str
    shopify_api_version: str = "2024-07"
    shopify_timeout_seconds: float = 30.0
    lookup_page_size: int = 20

    host: str = "0.0.0.0"
    port: int = 3000

    static_dir: Path = Path("public")
    logs_dir: Path = Path("logs")
    log_level: str = "INFO"

    metrics_enabled: bool = True
    otel_enabled: bool = True
    otel_service_name: str = "stock-locator"
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4317"

    @property
    def graphql_endpoint(self) -> str:
        return (
            f"https://{normalize_shop(self.shopify_shop)}"
            f"/admin/api/{self.shopify_api_version}/graphql.json"
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "Settings":
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        missing = [name for name in REQUIRED_ENV if not os.getenv(name, "").strip()]
        if missing:
            raise ConfigurationError(missing)

        return cls(
            env=os.getenv("ENV", "development"),
            project_name=os.getenv("PROJECT_NAME", "Stock Locator"),
            shopify_shop=os.environ["SHOPIFY_SHOP"].strip(),
            shopify_access_token=os.environ["SHOPIFY_ACCESS_TOKEN"].strip(),
            shopify_api_version=os.getenv("SHOPIFY_API_VERSION", "2024-07"),
            shopify_timeout_seconds=_number("SHOPIFY_TIMEOUT_SECONDS", "30", float),
            lookup_page_size=_number("LOOKUP_PAGE_SIZE", "20", int),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_number("PORT", "3000", int),
            static_dir=Path(os.getenv("STATIC_DIR", "public")),
            logs_dir=Path(os.getenv("LOGS_DIR", "logs")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            metrics_enabled=_flag(os.getenv("METRICS_ENABLED", "true")),
            otel_enabled=_flag(os.getenv("OTEL_ENABLED", "true")),
            otel_service_name=os.getenv("OTEL_SERVICE_NAME", "stock-locator"),
            otel_exporter_otlp_endpoint=os.getenv(
                "OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317"
            ),
        )
