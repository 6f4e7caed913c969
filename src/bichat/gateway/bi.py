"""BI query gateway.

Relays dashboard questions to the remote analytics backend and maps
transport failures onto the gateway error taxonomy.
"""

import logging
from typing import Any

import httpx

from .errors import InternalError, NoUpstreamResponse, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_BI_ENDPOINT = "http://52.3.202.231:8080/bi/query"

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _response_body(response: httpx.Response) -> Any:
    """Decode an upstream body as JSON, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class BIQueryGateway:
    """Forwards query payloads to the BI backend unmodified.

    The payload is opaque: conventionally `{question, conversation_history?}`
    but never inspected. No retries are attempted.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_BI_ENDPOINT,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            endpoint: Full URL of the BI query endpoint
            timeout: Upstream timeout in seconds, None waits indefinitely
            client: Pre-built httpx client (tests pass one with a mock transport)
        """
        self.endpoint = endpoint
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), follow_redirects=True
        )

    async def query(self, payload: Any) -> Any:
        """POST payload to the BI backend and return its decoded JSON.

        Args:
            payload: Decoded JSON request body, forwarded verbatim

        Returns:
            Upstream JSON body

        Raises:
            UpstreamError: Upstream answered with an error status; carries
                that status and the upstream body as details
            NoUpstreamResponse: Upstream could not be reached
            InternalError: Any other failure
        """
        try:
            response = await self._client.post(
                self.endpoint, json=payload, headers=JSON_HEADERS
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            details = _response_body(e.response)
            logger.error(
                f"BI server error: {e.response.status_code} {str(details)[:200]}"
            )
            raise UpstreamError(
                "Server error",
                status_code=e.response.status_code,
                details=details,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"No response from BI server at {self.endpoint}: {e!r}")
            raise NoUpstreamResponse("No response from server") from e
        except Exception as e:
            logger.error(f"API proxy error: {e!r}")
            raise InternalError("Internal server error") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
