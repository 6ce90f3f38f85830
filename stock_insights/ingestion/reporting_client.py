"""
Reporting API Client

Async access to the store's inventory analysis report, plus a fetcher that
keeps only the most recently requested snapshot when refreshes overlap.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog

from stock_insights.classification.models import ClassificationError, InvalidInput, InventoryMetricItem, parse_records
from stock_insights.config import get_settings
from stock_insights.config.settings import ReportingApiSettings

logger = structlog.get_logger(__name__)


class ReportingApiError(ClassificationError):
    """Raised when the reporting API cannot provide a snapshot"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReportingApiClient:
    """
    Client for the inventory analysis endpoint.

    Example:
        async with ReportingApiClient() as client:
            items = await client.fetch_inventory_metrics(category="PYTHON")
    """

    def __init__(
        self,
        settings: Optional[ReportingApiSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings().reporting_api
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            headers=self._headers(),
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.settings.api_token is not None:
            headers["Authorization"] = f"Bearer {self.settings.api_token.get_secret_value()}"
        return headers

    async def fetch_inventory_metrics(self, category: Optional[str] = None) -> List[InventoryMetricItem]:
        """
        Fetch the inventory analysis report.

        Args:
            category: Optional category code filter

        Raises:
            ReportingApiError: On HTTP errors, network errors or a malformed body
        """
        params: Dict[str, Any] = {}
        if category:
            params["categoryCode"] = category

        url = self.settings.inventory_url
        logger.debug("Fetching inventory report", url=url, category=category)

        try:
            response = await self._client.get(url, params=params, headers=self._headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Reporting API returned an error", status_code=status, url=url)
            raise ReportingApiError(f"Reporting API returned {status}", status_code=status) from e
        except httpx.RequestError as e:
            logger.warning("Reporting API unreachable", error=str(e), url=url)
            raise ReportingApiError(f"Reporting API request failed: {e}") from e
        except ValueError as e:
            raise ReportingApiError(f"Reporting API returned invalid JSON: {e}") from e

        try:
            items = parse_records(payload)
        except InvalidInput as e:
            raise ReportingApiError(f"Reporting API returned an unexpected payload: {e}") from e

        logger.info("Inventory report fetched", items=len(items), category=category)
        return items

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ReportingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


@dataclass(frozen=True)
class Snapshot:
    """Items from one completed fetch"""
    items: List[InventoryMetricItem]
    generation: int
    category: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SnapshotFetcher:
    """
    Last-issued-wins snapshot refresh.

    Every refresh takes a new generation number when it starts. A fetch that
    completes after a newer one was issued is discarded; it is not cancelled.
    """

    def __init__(self, client: ReportingApiClient):
        self.client = client
        self._generation = 0
        self._current: Optional[Snapshot] = None

    @property
    def current(self) -> Optional[Snapshot]:
        return self._current

    @property
    def generation(self) -> int:
        """Newest issued generation"""
        return self._generation

    async def refresh(self, category: Optional[str] = None) -> Optional[Snapshot]:
        """
        Fetch a new snapshot.

        Returns the new snapshot, or the current one when this fetch was
        superseded while in flight (None if nothing has landed yet).

        Raises:
            ReportingApiError: If this fetch failed and is still the newest
        """
        self._generation += 1
        generation = self._generation

        try:
            items = await self.client.fetch_inventory_metrics(category=category)
        except ReportingApiError:
            if generation != self._generation:
                logger.info("Discarding failed superseded fetch", generation=generation, newest=self._generation)
                return self._current
            raise

        if generation != self._generation:
            logger.info("Discarding stale snapshot", generation=generation, newest=self._generation)
            return self._current
        self._current = Snapshot(items=items, generation=generation, category=category)

        return self._current

    async def aclose(self) -> None:
        await self.client.aclose()
