"""Unit tests for DashboardClient request shaping and fallbacks."""

import base64
import json
from pathlib import Path

import httpx
import pytest

from bichat.client import DashboardClient


def make_client(handler) -> DashboardClient:
    return DashboardClient(
        base_url="http://bichat.test", transport=httpx.MockTransport(handler)
    )


class TestAsk:
    """Test question round trips and conversation history."""

    @pytest.mark.asyncio
    async def test_first_question_has_no_history(self) -> None:
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"insights": "Up 5%"})

        client = make_client(handler)

        result = await client.ask("How are sales?")

        assert result == {"insights": "Up 5%"}
        assert bodies == [{"question": "How are sales?"}]

    @pytest.mark.asyncio
    async def test_follow_up_sends_history(self) -> None:
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/bi-query"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"insights": "Up 5%"})

        client = make_client(handler)
        await client.ask("How are sales?")
        await client.ask("And last quarter?")

        assert bodies[1] == {
            "question": "And last quarter?",
            "conversation_history": "User: How are sales?\nAssistant: Up 5%",
        }
        assert len(client.history) == 2

    @pytest.mark.asyncio
    async def test_reset_clears_history(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json={}))
        await client.ask("q")

        client.reset()

        assert client.conversation_history() == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "handler",
        [
            lambda request: httpx.Response(502, json={"error": "No response from server"}),
            lambda request: httpx.Response(200, text="not json"),
            lambda request: httpx.Response(200, json=["not", "a", "dict"]),
        ],
    )
    async def test_failures_return_none(self, handler) -> None:
        client = make_client(handler)

        assert await client.ask("q") is None
        assert client.history == []

    @pytest.mark.asyncio
    async def test_network_failure_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await make_client(handler).ask("q") is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        assert await make_client(handler).ask("q") is None

    def test_default_timeout_is_thirty_seconds(self) -> None:
        assert DashboardClient().timeout == 30.0


class TestSynthesize:
    """Test speech requests."""

    @pytest.mark.asyncio
    async def test_returns_audio(self) -> None:
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/speech-synthesis"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, content=b"mp3", headers={"content-type": "audio/mpeg"})

        client = make_client(handler)

        assert await client.synthesize("hello", voice_id="v1") == b"mp3"
        assert bodies == [{"text": "hello", "voice_id": "v1"}]

    @pytest.mark.asyncio
    async def test_omits_voice_when_not_given(self) -> None:
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, content=b"mp3")

        await make_client(handler).synthesize("hello")

        assert bodies == [{"text": "hello"}]

    @pytest.mark.asyncio
    async def test_error_returns_none(self) -> None:
        client = make_client(
            lambda request: httpx.Response(500, json={"error": "Failed to generate speech"})
        )

        assert await client.synthesize("hello") is None


class TestSaveChart:
    """Test chart extraction from BI responses."""

    def test_writes_decoded_image(self, tmp_path: Path) -> None:
        png = b"\x89PNG\r\n\x1a\nfake"
        response = {"formatted_data": {"image_base64": base64.b64encode(png).decode()}}

        path = DashboardClient.save_chart(response, tmp_path / "chart.png")

        assert path == tmp_path / "chart.png"
        assert path.read_bytes() == png

    def test_accepts_data_url(self, tmp_path: Path) -> None:
        encoded = base64.b64encode(b"img").decode()
        response = {"formatted_data": {"image_base64": f"data:image/png;base64,{encoded}"}}

        path = DashboardClient.save_chart(response, tmp_path / "chart.png")

        assert path is not None
        assert path.read_bytes() == b"img"

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"formatted_data": None},
            {"formatted_data": {"image_base64": ""}},
            {"formatted_data": "not-an-object"},
            {"formatted_data": ["image_base64"]},
            {"formatted_data": {"image_base64": 42}},
            {"formatted_data": {"image_base64": ["aW1n"]}},
        ],
    )
    def test_missing_chart_returns_none(self, response: dict, tmp_path: Path) -> None:
        assert DashboardClient.save_chart(response, tmp_path / "chart.png") is None

    def test_invalid_base64_returns_none(self, tmp_path: Path) -> None:
        response = {"formatted_data": {"image_base64": "!!!not-base64!!!"}}

        assert DashboardClient.save_chart(response, tmp_path / "chart.png") is None
        assert not (tmp_path / "chart.png").exists()
