"""
Pytest configuration and fixtures
"""
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest
from fastapi.testclient import TestClient

from stocklocator.core.config import Settings
from stocklocator.shopify.client import GraphQLExecutor


class FakeShopify(GraphQLExecutor):
    """In-memory stand-in for the Shopify Admin GraphQL API.

    Understands the two operations the service sends: the barcode search
    and ``metafieldsSet``. Every call is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.variants: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.user_errors: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None

    def add_variant(
        self,
        variant_id: str,
        title: str,
        product_title: str,
        barcode: str,
        location: Optional[str] = None,
    ) -> None:
        self.variants[variant_id] = {
            "id": variant_id,
            "title": title,
            "barcode": barcode,
            "product": {"title": product_title},
            "location": location,
        }

    def execute(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        variables = dict(variables or {})
        self.calls.append({"query": query, "variables": variables})

        if self.fail_with is not None:
            raise self.fail_with

        if "metafieldsSet" in query:
            return self._set_metafields(variables["metafields"])
        return self._search(variables["q"], variables["first"])

    @property
    def mutations(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if "metafieldsSet" in c["query"]]

    def _search(self, q: str, first: int) -> Dict[str, Any]:
        barcode = q.split("barcode:", 1)[1]
        edges = []
        for v in self.variants.values():
            if v["barcode"] != barcode:
                continue
            node = {
                "id": v["id"],
                "title": v["title"],
                "barcode": v["barcode"],
                "product": v["product"],
                "metafield": None if v["location"] is None else {"value": v["location"]},
            }
            edges.append({"node": node})
        return {"productVariants": {"edges": edges[:first]}}

    def _set_metafields(self, metafields: List[Dict[str, Any]]) -> Dict[str, Any]:
        if self.user_errors:
            return {"metafieldsSet": {"metafields": [], "userErrors": self.user_errors}}

        saved = []
        for m in metafields:
            variant = self.variants[m["ownerId"]]
            variant["location"] = m["value"]
            saved.append(
                {
                    "id": f"gid://shopify/Metafield/{abs(hash(m['ownerId'])) % 10_000}",
                    "namespace": m["namespace"],
                    "key": m["key"],
                    "value": m["value"],
                }
            )
        return {"metafieldsSet": {"metafields": saved, "userErrors": []}}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    static_dir = tmp_path / "public"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<html><body>Stock Locator</body></html>")

    return Settings(
        env="test",
        shopify_shop="test-store.myshopify.com",
        shopify_access_token="shpat_test",
        static_dir=static_dir,
        logs_dir=tmp_path / "logs",
        metrics_enabled=False,
        otel_enabled=False,
    )


@pytest.fixture
def shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture
def client(settings: Settings, shopify: FakeShopify) -> TestClient:
    from stocklocator.main import create_app

    app = create_app(settings, executor=shopify)
    with TestClient(app) as c:
        yield c
