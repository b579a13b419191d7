# ============================================================================
# SEARCH INDEX CHECK TESTS
# ============================================================================
# STATUS: Tests - Search index existence, thresholds and categories
# PURPOSE: Verify status grading and credential handling against a fake
#          search API served through httpx.MockTransport
# CREATED: 18 OCT 2026
# ============================================================================
"""
Search Index Check Tests

Run with:
    pytest tests/test_search.py -v
"""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from core.contracts import HealthStatus
from health.checks import SearchIndexCheck
from health.checks.search import CountThreshold, category_node_id, grade_count


class FakeIndex:
    """In-memory search API: hit counts keyed by filter string."""

    def __init__(self, counts=None, exists=True, query_status=200):
        self.counts = counts or {}
        self.exists = exists
        self.query_status = query_status
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/settings"):
            if not self.exists:
                return httpx.Response(404, json={"message": "Index does not exist"})
            return httpx.Response(200, json={})

        if self.query_status != 200:
            return httpx.Response(self.query_status, json={"message": "Invalid Application-ID or API key"})
        params = parse_qs(json.loads(request.content)["params"])
        search_filter = params.get("filters", [""])[0]
        body = {"nbHits": self.counts.get(search_filter, 0), "hits": []}
        if "facets" in params:
            body["facets"] = {"locale": {"en": self.counts.get("", 0)}}
        return httpx.Response(200, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _check(index: FakeIndex, **kwargs) -> SearchIndexCheck:
    return SearchIndexCheck(
        index_name="products",
        application_id="APP",
        api_key="key",
        transport=index.transport(),
        **kwargs,
    )


def _child(node, node_id):
    return next(child for child in node.services if child.id == node_id)


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch):
    for name in ("ALGOLIA_APPLICATION_ID", "ALGOLIA_ADMIN_API_KEY", "ALGOLIA_SEARCH_API_KEY"):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# THRESHOLDS
# ============================================================================

class TestGradeCount:
    """Test count grading."""

    @pytest.mark.parametrize("count,expected", [
        (2, HealthStatus.DOWN),
        (3, HealthStatus.PARTIAL),
        (4, HealthStatus.PARTIAL),
        (5, HealthStatus.UP),
    ])
    def test_grading(self, count, expected):
        assert grade_count(count, CountThreshold(critical=3, warning=5)) == expected

    def test_category_node_id(self):
        assert category_node_id("Home  Goods") == "category_home_goods"


# ============================================================================
# CHECK
# ============================================================================

class TestSearchIndexCheck:
    """Test the search index check end to end."""

    def test_healthy_index(self):
        index = FakeIndex(counts={"": 10, "preview:false": 8, "preview:true": 2})
        node = asyncio.run(_check(index, total_records={"critical": 3, "warning": 5}).run())

        assert node.id == "search"
        assert node.status == HealthStatus.UP
        records = _child(node, "record_count")
        assert records.metadata["totalRecords"] == 10
        assert records.metadata["productionRecords"] == 8
        assert records.metadata["previewRecords"] == 2
        assert records.metadata["localeBreakdown"] == {"en": 10}
        assert _child(node, "search_functionality").status == HealthStatus.UP

    def test_credentials_sent_as_headers(self):
        index = FakeIndex(counts={"": 1})
        asyncio.run(_check(index).run())
        request = index.requests[0]
        assert request.headers["X-Algolia-Application-Id"] == "APP"
        assert request.headers["X-Algolia-API-Key"] == "key"
        assert request.url.host.lower() == "app-dsn.algolia.net"
        assert request.url.path == "/1/indexes/products/settings"

    def test_missing_index_is_down(self):
        node = asyncio.run(_check(FakeIndex(exists=False)).run())
        assert node.status == HealthStatus.DOWN
        assert 'Index "products" does not exist' in node.message
        assert node.services is None

    def test_low_record_count(self):
        index = FakeIndex(counts={"": 4})
        node = asyncio.run(_check(index, total_records={"critical": 3, "warning": 5}).run())
        records = _child(node, "record_count")
        assert records.status == HealthStatus.PARTIAL
        assert records.message == "Warning: 4 records (recommended: 5)"
        assert node.status == HealthStatus.PARTIAL

    def test_critical_record_count(self):
        index = FakeIndex(counts={"": 1})
        node = asyncio.run(_check(index, total_records={"critical": 3, "warning": 5}).run())
        assert _child(node, "record_count").message == "Critical: Only 1 records (minimum: 3)"
        assert node.status == HealthStatus.DOWN

    def test_categories(self):
        index = FakeIndex(counts={
            "": 50,
            'categories:"Shoes"': 20,
            'department:"hats"': 1,
        })
        check = _check(index, categories={
            "Shoes": {"critical": 5, "warning": 10},
            "Hats": {"critical": 2, "warning": 4, "field": "department", "value": "hats"},
        })
        node = asyncio.run(check.run())

        categories = _child(node, "categories")
        shoes = _child(categories, "category_shoes")
        hats = _child(categories, "category_hats")
        assert shoes.status == HealthStatus.UP
        assert shoes.metadata["recordCount"] == 20
        assert hats.status == HealthStatus.DOWN
        assert hats.metadata["filter"] == 'department:"hats"'
        assert categories.status == HealthStatus.DOWN

    def test_skip_heavy_facets(self):
        index = FakeIndex(counts={"": 10})
        asyncio.run(_check(
            index,
            total_records={"critical": 1, "warning": 2},
            skip_heavy_facets=True,
        ).run())
        facet_requests = [
            parse_qs(json.loads(r.content)["params"])
            for r in index.requests
            if r.method == "POST" and "facets" in json.loads(r.content)["params"]
        ]
        assert facet_requests[0]["facets"] == ["locale,preview"]

    def test_failing_search_is_unknown(self):
        node = asyncio.run(_check(FakeIndex(query_status=403), total_records={"critical": 1, "warning": 2}).run())
        assert node.status == HealthStatus.UNKNOWN
        assert "403" in node.message

    def test_search_failure_without_thresholds_is_down(self):
        node = asyncio.run(_check(FakeIndex(query_status=500)).run())
        functionality = _child(node, "search_functionality")
        assert functionality.status == HealthStatus.DOWN
        assert functionality.message == "Search failed"


class TestCredentials:
    """Test credential resolution."""

    def test_missing_credentials_is_unknown(self):
        index = FakeIndex()
        check = SearchIndexCheck(index_name="products", transport=index.transport())
        node = asyncio.run(check.run())

        assert node.status == HealthStatus.UNKNOWN
        assert node.message == "Search credentials not configured"
        assert index.requests == []

    def test_search_only_key(self, monkeypatch):
        monkeypatch.setenv("ALGOLIA_APPLICATION_ID", "ENVAPP")
        monkeypatch.setenv("ALGOLIA_ADMIN_API_KEY", "admin")
        monkeypatch.setenv("ALGOLIA_SEARCH_API_KEY", "search-only")
        index = FakeIndex(counts={"": 1})
        check = SearchIndexCheck(index_name="products", use_search_key=True, transport=index.transport())
        asyncio.run(check.run())
        assert index.requests[0].headers["X-Algolia-API-Key"] == "search-only"

    def test_admin_key_by_default(self, monkeypatch):
        monkeypatch.setenv("ALGOLIA_APPLICATION_ID", "ENVAPP")
        monkeypatch.setenv("ALGOLIA_ADMIN_API_KEY", "admin")
        index = FakeIndex(counts={"": 1})
        asyncio.run(SearchIndexCheck(index_name="products", transport=index.transport()).run())
        assert index.requests[0].headers["X-Algolia-API-Key"] == "admin"
