"""
EDD Client Implementation

Provides a client for the Easy Digital Downloads REST API: URL building
with query-string authentication, a bounded retry loop, and one method per
resource that unwraps the resource's response envelope.
"""

import logging
import time
from typing import Any, Callable, get_args
from urllib.parse import urljoin

import httpx

from ..core.models import (
    EDDClientConfig,
    StatsType,
    StatsDatePreset,
    RetryState,
    Product,
    Sale,
    Customer,
    Discount,
    DownloadLog,
    ProductStat,
    APIError,
    TransportError,
    HTTPStatusError,
    ApplicationError,
)

logger = logging.getLogger(__name__)

# Diagnostic fields the API mixes into flat stats responses
REQUEST_SPEED_FIELD = "request_speed"
TOTALS_FIELD = "totals"

# Values of StatsDatePreset, for callers that validate at runtime
STATS_DATE_PRESETS = get_args(StatsDatePreset)

QueryParams = dict[str, str | int | float | bool | None]


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _stats_type(value: StatsType | str) -> str:
    return StatsType(value).value


def _first(items: list[Any]) -> Any | None:
    return items[0] if items else None


def _envelope(response: Any) -> dict[str, Any]:
    # A body that is not an object carries no records
    return response if isinstance(response, dict) else {}


class EDDClient:
    """
    Client for the Easy Digital Downloads REST API.

    Features:
    - Key/token query-string authentication (products are public)
    - Retries on transport, HTTP and API-level errors with 1s, 2s, 4s... backoff
    - Typed records unwrapped from each endpoint's envelope
    """

    def __init__(
        self,
        config: EDDClientConfig,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        sleep: Callable[[float], None] | None = None,
    ):
        """
        Initialize the EDD client.

        Args:
            config: Store URL and API credentials
            http_client: Optional httpx client (created if None)
            timeout_seconds: Request timeout in seconds
            max_retries: Attempts per logical request
            sleep: Delay function used between attempts (default time.sleep)
        """
        self.config = config
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.sleep = sleep if sleep is not None else time.sleep

        # Track if we own the HTTP client (for cleanup)
        self._owns_client = http_client is None

        if http_client is None:
            self.http_client = httpx.Client(timeout=timeout_seconds)
        else:
            self.http_client = http_client

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_client and self.http_client:
            self.http_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ===== URL BUILDING =====

    def _compose_url(self, endpoint: str, query: dict[str, str]) -> str:
        url = httpx.URL(urljoin(self.config.api_url, endpoint))
        if query:
            url = url.copy_merge_params(query)
        return str(url)

    def _build_public_url(self, endpoint: str, params: QueryParams | None = None) -> str:
        """
        Build a URL for an endpoint that needs no authentication.

        Args:
            endpoint: Path relative to the API base URL (e.g., "products/")
            params: Query parameters; None values are omitted

        Returns:
            Full URL
        """
        query = {
            key: _query_value(value)
            for key, value in (params or {}).items()
            if value is not None
        }
        logger.debug(f"GET {endpoint} params={query}")
        return self._compose_url(endpoint, query)

    def _build_url(self, endpoint: str, params: QueryParams | None = None) -> str:
        """
        Build an authenticated URL.

        The key and token are set after the caller's parameters so they
        are always present.

        Args:
            endpoint: Path relative to the API base URL (e.g., "sales/")
            params: Query parameters; None values are omitted

        Returns:
            Full URL including key and token
        """
        query = {
            key: _query_value(value)
            for key, value in (params or {}).items()
            if value is not None
        }
        logger.debug(f"GET {endpoint} params={query}")
        query["key"] = self.config.api_key
        query["token"] = self.config.api_token
        return self._compose_url(endpoint, query)

    # ===== REQUESTS =====

    def _fetch(self, url: str) -> Any:
        """Perform one GET and classify its failure, if any."""
        try:
            response = self.http_client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON response: {e}", status_code=response.status_code
            ) from e

        if isinstance(data, dict) and data.get("error"):
            raise ApplicationError(
                f"EDD API Error: {data['error']}", status_code=response.status_code
            )

        return data

    def request(self, url: str, retries: int | None = None) -> Any:
        """
        GET a URL, retrying any failure.

        Every failure kind is retried the same way, including API-level
        errors such as an invalid key.

        Args:
            url: Fully built request URL
            retries: Total attempts (defaults to max_retries)

        Returns:
            Decoded JSON body

        Raises:
            APIError: The last failure once all attempts are used
        """
        if retries is None:
            retries = self.max_retries

        path = httpx.URL(url).path
        attempt = 1
        last_error: APIError | None = None
        data: Any = None
        state = RetryState.ATTEMPTING if retries > 0 else RetryState.EXHAUSTED

        while True:
            logger.debug(f"{path}: {state.value} (attempt {attempt}/{retries})")

            if state is RetryState.ATTEMPTING:
                try:
                    data = self._fetch(url)
                except APIError as e:
                    last_error = e
                    logger.warning(f"Request to {path} failed (attempt {attempt}/{retries}): {e}")
                    state = RetryState.WAITING if attempt < retries else RetryState.EXHAUSTED
                else:
                    state = RetryState.SUCCEEDED

            elif state is RetryState.WAITING:
                # Exponential backoff: 1s, 2s, 4s
                self.sleep(2 ** (attempt - 1))
                attempt += 1
                state = RetryState.ATTEMPTING

            elif state is RetryState.SUCCEEDED:
                return data

            else:
                raise last_error or APIError("Request failed after retries")

    # ===== PRODUCTS METHODS (public) =====

    def list_products(self, number: int | None = None, product: int | None = None) -> list[Product]:
        """
        List products.

        Args:
            number: Maximum number of products to return
            product: Restrict to a single product ID

        Returns:
            List of Product records
        """
        url = self._build_public_url("products/", {"number": number, "product": product})
        response = _envelope(self.request(url))
        return [Product.from_dict(p) for p in response.get("products") or []]

    def get_product(self, product_id: int) -> Product | None:
        """Get a single product by ID, or None if it does not exist."""
        return _first(self.list_products(product=product_id))

    # ===== SALES METHODS =====

    def list_sales(
        self,
        number: int | None = None,
        page: int | None = None,
        email: str | None = None,
        startdate: str | None = None,
        enddate: str | None = None,
    ) -> list[Sale]:
        """
        List recent sales with optional filtering.

        Args:
            number: Number of sales per page
            page: Page number
            email: Only sales made with this customer email
            startdate: Start date, YYYYMMDD
            enddate: End date, YYYYMMDD

        Returns:
            List of Sale records (empty if the envelope has none)
        """
        url = self._build_url(
            "sales/",
            {
                "number": number,
                "page": page,
                "email": email,
                "startdate": startdate,
                "enddate": enddate,
            },
        )
        return self._sales(url)

    def get_sale_by_id(self, sale_id: int) -> Sale | None:
        """Get a sale by payment ID."""
        return _first(self._sales(self._build_url("sales/", {"id": sale_id})))

    def get_sale_by_key(self, purchase_key: str) -> Sale | None:
        """Get a sale by purchase key."""
        return _first(self._sales(self._build_url("sales/", {"purchasekey": purchase_key})))

    def search_sales_by_email(
        self, email: str, number: int | None = None, page: int | None = None
    ) -> list[Sale]:
        return self.list_sales(number=number, page=page, email=email)

    def _sales(self, url: str) -> list[Sale]:
        response = _envelope(self.request(url))
        return [Sale.from_dict(s) for s in response.get("sales") or []]

    # ===== CUSTOMERS METHODS =====

    def list_customers(self, number: int | None = None, page: int | None = None) -> list[Customer]:
        """List customers with pagination."""
        return self._customers(self._build_url("customers/", {"number": number, "page": page}))

    def get_customer_by_id(self, customer_id: int) -> Customer | None:
        return _first(self._customers(self._build_url("customers/", {"customer": customer_id})))

    def get_customer_by_email(self, email: str) -> Customer | None:
        return _first(self._customers(self._build_url("customers/", {"email": email})))

    def _customers(self, url: str) -> list[Customer]:
        response = _envelope(self.request(url))
        return [Customer.from_dict(c) for c in response.get("customers") or []]

    # ===== STATS METHODS =====

    def get_stats(self, type: StatsType | str, date: str | None = None) -> dict[str, Any]:
        """
        Get current month, last month and all-time totals.

        The API answers either with a `stats` wrapper or with the
        requested type as a top-level key next to `request_speed`. Both
        are normalized to `{type: {...}}`.

        Args:
            type: "sales" or "earnings"
            date: Optional predefined period (see STATS_DATE_PRESETS)

        Returns:
            Mapping from stats type to its figures
        """
        stats_type = _stats_type(type)
        url = self._build_url("stats/", {"type": stats_type, "date": date})
        response = _envelope(self.request(url))

        if isinstance(response.get("stats"), dict):
            return response["stats"]

        return {stats_type: response.get(stats_type)}

    def get_stats_by_date_range(
        self, type: StatsType | str, start_date: str, end_date: str
    ) -> dict[str, float]:
        """
        Get daily stats for a date range.

        Args:
            type: "sales" or "earnings"
            start_date: Start date, YYYYMMDD
            end_date: End date, YYYYMMDD

        Returns:
            Mapping from date to value, without the diagnostic and totals keys
        """
        url = self._build_url(
            "stats/",
            {
                "type": _stats_type(type),
                "date": "range",
                "startdate": start_date,
                "enddate": end_date,
            },
        )
        response = _envelope(self.request(url))
        return {
            key: value
            for key, value in response.items()
            if key not in (REQUEST_SPEED_FIELD, TOTALS_FIELD)
        }

    def get_stats_by_product(
        self, type: StatsType | str, product_id: int | None = None
    ) -> list[ProductStat]:
        """
        Get stats per product.

        Args:
            type: "sales" or "earnings"
            product_id: A single product, or None for all products

        Returns:
            (name, value) pairs for every numeric field except request_speed
        """
        url = self._build_url(
            "stats/",
            {
                "type": _stats_type(type),
                "product": product_id if product_id is not None else "all",
            },
        )
        response = _envelope(self.request(url))

        results = []
        for key, value in response.items():
            if key == REQUEST_SPEED_FIELD:
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                results.append(ProductStat(name=key, value=value))
        return results

    # ===== DISCOUNTS METHODS =====

    def list_discounts(self, number: int | None = None) -> list[Discount]:
        return self._discounts(self._build_url("discounts/", {"number": number}))

    def get_discount(self, discount_id: int) -> Discount | None:
        return _first(self._discounts(self._build_url("discounts/", {"discount": discount_id})))

    def _discounts(self, url: str) -> list[Discount]:
        response = _envelope(self.request(url))
        return [Discount.from_dict(d) for d in response.get("discounts") or []]

    # ===== DOWNLOAD LOGS METHODS =====

    def get_download_logs(
        self,
        number: int | None = None,
        product: int | None = None,
        customer: int | None = None,
    ) -> list[DownloadLog]:
        """
        Get file download logs.

        Args:
            number: Number of log entries
            product: Only downloads of this product ID
            customer: Only downloads by this customer ID

        Returns:
            List of DownloadLog records (empty if the envelope has none)
        """
        url = self._build_url(
            "file-download-logs/",
            {"number": number, "product": product, "customer": customer},
        )
        response = _envelope(self.request(url))
        return [DownloadLog.from_dict(log) for log in response.get("download_logs") or []]
