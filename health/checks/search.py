# ============================================================================
# SEARCH INDEX HEALTH CHECK
# ============================================================================
# STATUS: Infrastructure - Algolia index existence, size and categories
# PURPOSE: Verify the search index exists, answers queries and holds
#          enough records overall and per category
# CREATED: 18 OCT 2026
# ============================================================================
"""
Search Index Health Check

Talks to the Algolia REST API with httpx. Group node "search" with
children:
- index_existence       GET settings; a 404 short-circuits the check to Down
- record_count          total / production / preview hit counts against
                        critical / warning thresholds (only if configured)
- search_functionality  one-hit empty query
- categories            one node per configured category, counted with a
                        filter, against its own thresholds

Thresholds: count < critical -> Down, count < warning -> Partial, else Up.

Credentials: application_id / api_key arguments, else ALGOLIA_APPLICATION_ID
and ALGOLIA_ADMIN_API_KEY (or ALGOLIA_SEARCH_API_KEY with use_search_key).
Missing credentials report Unknown without any network call.
"""

import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import httpx
from pydantic import BaseModel, Field

from __version__ import __version__
from core.contracts import HealthStatus
from core.logging import ComponentType, get_logger
from core.models import StatusNode
from health.aggregator import create_group_node, create_status_node, measure_time
from health.core import HealthCheck

logger = get_logger(__name__, ComponentType.CHECK)

_WHITESPACE = re.compile(r"\s+")

HEAVY_FACETS = ["*"]
LIGHT_FACETS = ["locale", "preview"]


class CountThreshold(BaseModel):
    """Minimum hit counts: below critical is Down, below warning is Partial."""
    critical: int = Field(ge=0)
    warning: int = Field(ge=0)


class CategoryThreshold(CountThreshold):
    """Per-category thresholds; the filter is `<field>:"<value>"`."""
    field: str = Field(default="categories", description="Attribute to filter on")
    value: Optional[str] = Field(default=None, description="Filter value (category name if None)")


class SearchIndexError(Exception):
    """Non-2xx response from the search API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Search API returned {status_code}: {message}")
        self.status_code = status_code


def grade_count(count: int, threshold: CountThreshold) -> HealthStatus:
    if count < threshold.critical:
        return HealthStatus.DOWN
    if count < threshold.warning:
        return HealthStatus.PARTIAL
    return HealthStatus.UP


def category_node_id(category: str) -> str:
    return "category_" + _WHITESPACE.sub("_", category.lower())


class SearchIndexClient:
    """
    Minimal async client for the Algolia search REST API.

    Args:
        application_id: Algolia application id
        api_key: Admin or search-only key
        index_name: Index to inspect
        timeout_ms: Per-request timeout
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        application_id: str,
        api_key: str,
        index_name: str,
        timeout_ms: int = 5000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.index_name = index_name
        self._client = httpx.AsyncClient(
            base_url=f"https://{application_id}-dsn.algolia.net/1/indexes/{quote(index_name, safe='')}",
            timeout=timeout_ms / 1000,
            transport=transport,
            headers={
                "X-Algolia-Application-Id": application_id,
                "X-Algolia-API-Key": api_key,
                "User-Agent": f"Healthgate-HealthCheck/{__version__}",
            },
        )

    async def __aenter__(self) -> "SearchIndexClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self._client.aclose()

    async def index_exists(self) -> bool:
        response = await self._client.get("/settings")
        if response.status_code == 404:
            return False
        _raise_for_status(response)
        return True

    async def count(self, filters: Optional[str] = None, facets: Optional[List[str]] = None) -> Dict[str, Any]:
        """Empty query returning no hits, only nbHits (and facets if asked)."""
        params: Dict[str, Any] = {
            "query": "",
            "hitsPerPage": 0,
            "analytics": "false",
            "clickAnalytics": "false",
            "enableABTest": "false",
        }
        if filters:
            params["filters"] = filters
        if facets:
            params["facets"] = ",".join(facets)
            params["maxValuesPerFacet"] = 1000
        return await self._query(params)

    async def search_works(self) -> bool:
        try:
            await self._query({"query": "", "hitsPerPage": 1, "analytics": "false"})
        except (httpx.HTTPError, SearchIndexError):
            return False
        return True

    async def _query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.post("/query", json={"params": urlencode(params)})
        _raise_for_status(response)
        return response.json()


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        message = response.json().get("message", "")
    except ValueError:
        message = response.text
    raise SearchIndexError(response.status_code, message or response.reason_phrase)


class SearchIndexCheck(HealthCheck):
    """
    Search index check.

    Args:
        index_name: Index to check
        application_id: Overrides ALGOLIA_APPLICATION_ID
        api_key: Overrides the key environment variables
        use_search_key: Read ALGOLIA_SEARCH_API_KEY instead of the admin key
        total_records: Thresholds for the whole index
        categories: {category name: thresholds}
        skip_heavy_facets: Request only locale / preview facets
        timeout_ms: Per-request timeout
        transport: Optional httpx transport
    """

    id = "search"
    name = "Search Index"

    def __init__(
        self,
        index_name: str,
        application_id: Optional[str] = None,
        api_key: Optional[str] = None,
        use_search_key: bool = False,
        total_records: Optional[Any] = None,
        categories: Optional[Dict[str, Any]] = None,
        skip_heavy_facets: bool = False,
        timeout_ms: int = 5000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.index_name = index_name
        self.application_id = application_id
        self.api_key = api_key
        self.use_search_key = use_search_key
        self.total_records = (
            CountThreshold.model_validate(total_records) if total_records is not None else None
        )
        self.categories = {
            category: CategoryThreshold.model_validate(threshold)
            for category, threshold in (categories or {}).items()
        }
        self.skip_heavy_facets = skip_heavy_facets
        self.timeout_ms = timeout_ms
        self.transport = transport

    def _credentials(self):
        application_id = self.application_id or os.getenv("ALGOLIA_APPLICATION_ID")
        key_var = "ALGOLIA_SEARCH_API_KEY" if self.use_search_key else "ALGOLIA_ADMIN_API_KEY"
        api_key = self.api_key or os.getenv(key_var)
        return application_id, api_key

    async def run(self) -> StatusNode:
        application_id, api_key = self._credentials()
        if not application_id or not api_key:
            return self.node(
                HealthStatus.UNKNOWN,
                "Search credentials not configured",
                note="Set ALGOLIA_APPLICATION_ID and ALGOLIA_ADMIN_API_KEY or ALGOLIA_SEARCH_API_KEY",
            )

        try:
            async with SearchIndexClient(
                application_id,
                api_key,
                self.index_name,
                self.timeout_ms,
                self.transport,
            ) as client:
                return await self._run_checks(client)
        except (httpx.HTTPError, SearchIndexError) as e:
            logger.error(f"Search index check failed: {e}")
            return self.node(HealthStatus.UNKNOWN, f"Unexpected error: {e}")

    async def _run_checks(self, client: SearchIndexClient) -> StatusNode:
        exists, duration = await measure_time(client.index_exists)
        if not exists:
            return self.node(
                HealthStatus.DOWN,
                f'Index "{self.index_name}" does not exist',
                duration=round(duration),
            )

        checks = [
            create_status_node(
                "index_existence",
                "Index Existence",
                HealthStatus.UP,
                f"Index exists ({round(duration)}ms)",
                metadata={"duration": round(duration)},
            )
        ]

        if self.total_records is not None:
            checks.append(await self._record_count(client))

        works, duration = await measure_time(client.search_works)
        checks.append(create_status_node(
            "search_functionality",
            "Search Functionality",
            HealthStatus.UP if works else HealthStatus.DOWN,
            f"Search functional ({round(duration)}ms)" if works else "Search failed",
            metadata={"duration": round(duration)},
        ))

        if self.categories:
            category_checks = [
                await self._category(client, category, threshold)
                for category, threshold in self.categories.items()
            ]
            checks.append(create_group_node("categories", "Categories", category_checks))

        return create_group_node(
            self.id,
            self.name,
            checks,
            metadata={"indexName": self.index_name},
        )

    async def _record_count(self, client: SearchIndexClient) -> StatusNode:
        threshold = self.total_records
        facets = LIGHT_FACETS if self.skip_heavy_facets else HEAVY_FACETS

        async def counts():
            everything = await client.count(facets=facets)
            production = await client.count(filters="preview:false")
            preview = await client.count(filters="preview:true")
            return everything, production["nbHits"], preview["nbHits"]

        (everything, production, preview), duration = await measure_time(counts)
        total = everything["nbHits"]
        status = grade_count(total, threshold)
        if status == HealthStatus.DOWN:
            message = f"Critical: Only {total} records (minimum: {threshold.critical})"
        elif status == HealthStatus.PARTIAL:
            message = f"Warning: {total} records (recommended: {threshold.warning})"
        else:
            message = f"{total} total records ({round(duration)}ms)"

        metadata = {
            "duration": round(duration),
            "totalRecords": total,
            "productionRecords": production,
            "previewRecords": preview,
            "thresholds": threshold.model_dump(),
        }
        locales = (everything.get("facets") or {}).get("locale")
        if locales:
            metadata["localeBreakdown"] = locales
        return create_status_node("record_count", "Record Count", status, message, metadata=metadata)

    async def _category(
        self,
        client: SearchIndexClient,
        category: str,
        threshold: CategoryThreshold,
    ) -> StatusNode:
        node_id = category_node_id(category)
        search_filter = f'{threshold.field}:"{threshold.value or category}"'
        try:
            result, duration = await measure_time(lambda: client.count(filters=search_filter))
        except (httpx.HTTPError, SearchIndexError) as e:
            return create_status_node(node_id, category, HealthStatus.UNKNOWN, f"Check failed: {e}")

        count = result["nbHits"]
        status = grade_count(count, threshold)
        if status == HealthStatus.DOWN:
            message = f"Critical: Only {count} (minimum: {threshold.critical})"
        elif status == HealthStatus.PARTIAL:
            message = f"Warning: {count} (recommended: {threshold.warning})"
        else:
            message = f"{count} records ({round(duration)}ms)"

        return create_status_node(
            node_id,
            category,
            status,
            message,
            metadata={
                "duration": round(duration),
                "recordCount": count,
                "filter": search_filter,
                "thresholds": threshold.model_dump(include={"critical", "warning"}),
            },
        )


__all__ = [
    "CategoryThreshold",
    "CountThreshold",
    "SearchIndexCheck",
    "SearchIndexClient",
    "SearchIndexError",
]
