"""HTTP client for the bichat gateways, as used by the dashboard UI."""

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://127.0.0.1:8000"
QUERY_TIMEOUT_SECONDS = 30.0

FALLBACK_MESSAGE = (
    "I'm sorry, I couldn't connect to the data server at the moment. "
    "This could be due to:\n\n"
    "• Network connectivity issues\n"
    "• Server temporarily unavailable\n"
    "• Request timeout\n\n"
    "Please check your internet connection and try again."
)


@dataclass(frozen=True)
class ConversationTurn:
    """One answered question in the conversation."""

    question: str
    answer: str


class DashboardClient:
    """Client for the bichat HTTP gateways.

    Failures never raise: each method logs the failure category and
    returns None so callers can show FALLBACK_MESSAGE.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER_URL,
        timeout: float = QUERY_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Root URL of a running bichat server
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests route to an app or mock)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.history: list[ConversationTurn] = []

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    def conversation_history(self) -> str:
        """Render previous turns as a plain-text transcript."""
        lines = []
        for turn in self.history:
            lines.append(f"User: {turn.question}")
            lines.append(f"Assistant: {turn.answer}")
        return "\n".join(lines)

    def reset(self) -> None:
        self.history.clear()

    async def ask(self, question: str) -> dict[str, Any] | None:
        """Send a question to the BI gateway.

        Args:
            question: Natural-language question

        Returns:
            Decoded BI response, or None if the question could not be answered
        """
        payload: dict[str, Any] = {"question": question}
        if self.history:
            payload["conversation_history"] = self.conversation_history()

        try:
            async with self._client() as client:
                response = await client.post("/bi-query", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {e!r}")
            return None
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Server error: {e.response.status_code} {e.response.text[:200]}"
            )
            return None
        except httpx.RequestError as e:
            logger.error(f"Network error - check if the server is accessible: {e!r}")
            return None
        except ValueError as e:
            logger.error(f"Invalid response from server: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Unexpected response type: {type(data).__name__}")
            return None

        answer = data.get("insights") or "(no insights)"
        self.history.append(ConversationTurn(question=question, answer=str(answer)))
        return data

    async def synthesize(self, text: str, voice_id: str | None = None) -> bytes | None:
        """Fetch synthesized speech for text.

        Args:
            text: Text to speak
            voice_id: Optional voice override

        Returns:
            MP3 bytes, or None if synthesis failed
        """
        payload: dict[str, Any] = {"text": text}
        if voice_id:
            payload["voice_id"] = voice_id

        try:
            async with self._client() as client:
                response = await client.post("/speech-synthesis", json=payload)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Speech synthesis failed: {e.response.status_code} "
                f"{e.response.text[:200]}"
            )
            return None
        except httpx.RequestError as e:
            logger.error(f"Speech synthesis request failed: {e!r}")
            return None

    @staticmethod
    def save_chart(response: dict[str, Any], path: str | Path) -> Path | None:
        """Write the chart image from a BI response to path.

        Args:
            response: Decoded BI response
            path: Destination file (PNG)

        Returns:
            Path written, or None if the response has no decodable chart
        """
        formatted = response.get("formatted_data")
        image = formatted.get("image_base64") if isinstance(formatted, dict) else None
        if not image or not isinstance(image, str):
            return None

        # Tolerate data URLs ("data:image/png;base64,....")
        if image.startswith("data:") and "," in image:
            image = image.split(",", 1)[1]

        try:
            data = base64.b64decode(image, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Error decoding chart: {e}")
            return None

        output_path = Path(path)
        output_path.write_bytes(data)
        return output_path
