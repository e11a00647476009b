"""Product categorizer collaborators used during sheet import."""

from typing import Any, Protocol

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dietimport.config import Settings, get_settings
from dietimport.logging_config import get_logger
from dietimport.schemas import ParsedProduct

logger = get_logger(__name__)


class CategorizerError(Exception):
    """Raised when a category lookup fails."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class ProductCategorizer(Protocol):
    """Suggests a shopping category for a parsed product."""

    def suggest_category(self, product: ParsedProduct) -> str | None: ...


class NullCategorizer:
    """Categorizer that leaves every product uncategorized."""

    def suggest_category(self, product: ParsedProduct) -> str | None:
        return None


class HttpCategorizer:
    """
    Client for a remote categorization service.

    POST {base_url}/categorize with {"name", "original"} returns
    {"category_id": str | null}. Timeouts and network errors are retried
    with exponential backoff; anything else surfaces as CategorizerError.
    """

    BACKOFF_BASE = 0.5
    BACKOFF_MAX = 10

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.BaseTransport | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.base_url = (base_url or settings.categorizer_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Categorizer base URL is not configured")
        self.timeout = timeout or settings.categorizer_timeout
        self.max_retries = max_retries or settings.categorizer_max_retries
        self.backoff_base = self.BACKOFF_BASE if backoff_base is None else backoff_base
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "DietImport/1.0",
                },
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpCategorizer":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def suggest_category(self, product: ParsedProduct) -> str | None:
        client = self._get_client()
        payload = {"name": product.name, "original": product.original}

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_base, max=self.BACKOFF_MAX),
            reraise=True,
        )
        def _do_request() -> httpx.Response:
            return client.post("/categorize", json=payload)

        try:
            response = _do_request()
        except httpx.HTTPError as e:
            logger.error(f"Categorization request failed after {self.max_retries} attempts: {e}")
            raise CategorizerError(
                f"Categorization request failed after {self.max_retries} attempts",
                response=str(e),
            ) from e

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            error_detail = response.text[:500] if response.text else "No details"
            raise CategorizerError(
                f"Categorization failed with status {response.status_code}",
                status_code=response.status_code,
                response=error_detail,
            )

        try:
            data = response.json() if response.text else {}
        except ValueError as e:
            raise CategorizerError("Categorization service returned invalid JSON") from e

        category_id = data.get("category_id") if isinstance(data, dict) else None
        return str(category_id) if category_id else None


def get_categorizer(settings: Settings | None = None) -> ProductCategorizer:
    """Build the configured categorizer, or a no-op one when none is set up."""
    settings = settings or get_settings()
    if settings.categorizer_base_url:
        return HttpCategorizer(settings=settings)
    return NullCategorizer()


def categorize_product(categorizer: ProductCategorizer, product: ParsedProduct) -> ParsedProduct:
    """
    Attach a suggested category to a product.

    Failures of any kind are logged and leave the product uncategorized.
    """
    try:
        category_id = categorizer.suggest_category(product)
    except Exception as e:
        logger.warning(f"Categorization failed for {product.name!r}: {e}")
        return product

    if not category_id:
        return product
    return product.with_category(category_id)
