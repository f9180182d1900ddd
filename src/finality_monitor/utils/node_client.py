import json
import logging
from types import TracebackType

import httpx

from ..exceptions import (
    BodyReadError,
    DecodeError,
    FetchError,
    HTTPStatusError,
    TransportError,
)
from ..models import BlockSummary

logger = logging.getLogger(__name__)


class NodeClient:
    """Read-only client for the node's block summary endpoints.
    
    Every fetch either returns a BlockSummary or raises exactly one
    FetchError subclass describing where it went wrong.
    """
    
    BEST_PATH: str = "/blocks/best"
    JUSTIFIED_PATH: str = "/blocks/justified"
    FINALIZED_PATH: str = "/blocks/finalized"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retry_count: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the node client.
        
        Args:
            base_url: Base address of the node API
            timeout: Per-request timeout in seconds
            retry_count: Extra attempts for transport, status and body-read failures
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if retry_count < 0:
            raise ValueError(f"Retry count must be non-negative, got {retry_count}")
        self.base_url: str = base_url
        self.retry_count: int = retry_count
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NodeClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def get_best(self) -> BlockSummary:
        """Fetch the current chain head."""
        return await self._get_summary(self.BEST_PATH)

    async def get_justified(self) -> BlockSummary:
        """Fetch the latest justified block."""
        return await self._get_summary(self.JUSTIFIED_PATH)

    async def get_finalized(self) -> BlockSummary:
        """Fetch the latest finalized block."""
        return await self._get_summary(self.FINALIZED_PATH)

    async def get_block(self, number: int) -> BlockSummary:
        """Fetch a block by height.
        
        Args:
            number: Block height
            
        Returns:
            Summary of the requested block
        """
        return await self._get_summary(f"/blocks/{number}")

    async def _get_summary(self, path: str) -> BlockSummary:
        """GET a block summary, retrying failures that may be transient.
        
        Decode errors are not retried, a malformed body will not fix itself.
        
        Raises:
            FetchError: The last failure once all attempts are used up
        """
        attempts = self.retry_count + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._fetch_once(path)
            except DecodeError:
                raise
            except FetchError as e:
                if attempt == attempts:
                    raise
                logger.debug(f"GET {path} failed (attempt {attempt}/{attempts}): {e}")
        raise FetchError(f"GET {path} was never attempted")

    async def _fetch_once(self, path: str) -> BlockSummary:
        request = self._client.build_request("GET", path)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            raise TransportError(f"GET {request.url} failed: {_describe(e)}") from e

        try:
            if response.status_code != httpx.codes.OK:
                raise HTTPStatusError(
                    f"status code not 200: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )

            try:
                body = await response.aread()
            except (httpx.RequestError, httpx.StreamError) as e:
                raise BodyReadError(f"error reading response body: {_describe(e)}") from e
        finally:
            await response.aclose()

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"unable to decode block summary: {e}") from e

        return BlockSummary.from_json(payload)


def _describe(error: Exception) -> str:
    """Render an httpx error, some of which carry an empty message."""
    return str(error) or type(error).__name__
