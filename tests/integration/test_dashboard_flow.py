"""Integration tests for DashboardClient against the real app over ASGI."""

import base64
import json

import httpx
import pytest

from bichat.cache import AudioCache
from bichat.client import DashboardClient
from bichat.config import load_config
from bichat.gateway import BIQueryGateway, SpeechSynthesisGateway
from bichat.server import create_app
from test_helpers import FakeTTSProvider, audio_for

CHART = base64.b64encode(b"\x89PNG fake chart").decode()


def build_client(bi_handler, provider: FakeTTSProvider) -> DashboardClient:
    bi = BIQueryGateway(
        endpoint="http://bi.test/bi/query",
        client=httpx.AsyncClient(transport=httpx.MockTransport(bi_handler)),
    )
    speech = SpeechSynthesisGateway(AudioCache(), lambda: provider)
    app = create_app(config=load_config(), speech_gateway=speech, bi_gateway=bi)
    return DashboardClient(
        base_url="http://bichat.test", transport=httpx.ASGITransport(app=app)
    )


class TestDashboardFlow:
    """Question -> insights -> chart -> spoken answer."""

    @pytest.mark.asyncio
    async def test_question_answer_and_speech(self, tmp_path) -> None:
        def bi_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "sql_query": "SELECT product, SUM(qty) FROM sales GROUP BY 1",
                    "results": [{"product": "A", "qty": 3}],
                    "visualization": "bar",
                    "formatted_data": {"image_base64": CHART},
                    "insights": "Product A leads sales.",
                },
            )

        provider = FakeTTSProvider()
        client = build_client(bi_handler, provider)

        answer = await client.ask("What are the top selling products?")
        assert answer is not None
        assert answer["insights"] == "Product A leads sales."

        chart = client.save_chart(answer, tmp_path / "chart.png")
        assert chart is not None
        assert chart.read_bytes() == b"\x89PNG fake chart"

        audio = await client.synthesize(answer["insights"])
        replay = await client.synthesize(answer["insights"])
        assert audio == replay == audio_for("Product A leads sales.", "pNInz6obpgDQGcFmaJgB")
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_unreachable_backend_yields_none(self) -> None:
        def bi_handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = build_client(bi_handler, FakeTTSProvider())

        assert await client.ask("How is our performance this quarter?") is None
        assert client.history == []

    @pytest.mark.asyncio
    async def test_follow_up_carries_history_upstream(self) -> None:
        seen: list[dict] = []

        def bi_handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"insights": f"answer {len(seen)}"})

        client = build_client(bi_handler, FakeTTSProvider())
        await client.ask("Show me revenue trends")
        await client.ask("Only for Q3")

        assert "conversation_history" not in seen[0]
        assert seen[1]["conversation_history"] == (
            "User: Show me revenue trends\nAssistant: answer 1"
        )
