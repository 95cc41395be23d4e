"""Shared fixtures: a local range API served by aiohttp."""

import asyncio
from dataclasses import dataclass, field

import pytest
from aiohttp import web

from pwnedcheck.client import RangeClient
from pwnedcheck.config import RequestDefaults

PASSWORD_HASH = "5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8"
NOT_PWNED_HASH = "37D5BE59A924245D07FE5EBC6710751BD1660A91"
SINGLE_LINE_HASH = "A0F417D58E726EB382EF3AE22EE95D07C0C4B40E"

RANGE_BODIES = {
    "5BAA6": (
        "003D68EB55068C33ACE09247EE4C639306B:3\r\n"
        "012C192B2F16F82EA0EB9EF18D9D539B0DD:1\r\n"
        "1E2AAA439972480CEC7F16C795BBB429372:1\r\n"
        "1E3687A61BFCE35F69B7408158101C8E414:1\r\n"
        "1E4C9B93F3F0682250B6CF8331B7EE68FD8:3303003\r\n"
        "1F2B668E8AABEF1C59E9EC6F82E3F3CD786:1\r\n"
        "20597F5AC10A2F67701B4AD1D3A09F72250:3\r\n"
    ),
    "37D5B": (
        "00A3BE4B3CD9CB2D1B3A88E3A9E8B42D7B1:2\r\n"
        "E59A924245D07FE5EBC6710751BD1660A90:7\r\n"
        "FFE8C03E2CD07F0E82BA1C0A02C4CC1A1D3:1"
    ),
    # Single line without a trailing newline
    "A0F41": "7D58E726EB382EF3AE22EE95D07C0C4B40E:4",
}


@dataclass
class RangeAPI:
    """Behaviour and request log of the local range API."""

    url: str = ""
    bodies: dict[str, str] = field(default_factory=lambda: dict(RANGE_BODIES))
    status: int = 200
    delay: float = 0.0
    chunk_size: int | None = None
    hang_after: str | None = None
    requests: list[dict] = field(default_factory=list)
    release: asyncio.Event = field(default_factory=asyncio.Event)

    def chunks(self, body: str) -> list[bytes]:
        data = body.encode("utf-8")
        if not self.chunk_size:
            return [data]
        return [data[i:i + self.chunk_size] for i in range(0, len(data), self.chunk_size)]


async def _wait(event: asyncio.Event, timeout: float) -> None:
    try:
        await asyncio.wait_for(event.wait(), timeout)
    except asyncio.TimeoutError:
        pass


@pytest.fixture
async def range_api(aiohttp_server):
    state = RangeAPI()

    async def handle_range(request: web.Request) -> web.StreamResponse:
        prefix = request.match_info["prefix"]
        state.requests.append({
            "prefix": prefix,
            "headers": dict(request.headers),
            "query": dict(request.query),
        })

        if state.delay:
            await _wait(state.release, state.delay)
        if state.status != 200:
            return web.Response(status=state.status, text="error")

        response = web.StreamResponse()
        response.content_type = "text/plain"
        await response.prepare(request)

        body = state.bodies.get(prefix, "")
        if state.hang_after is not None:
            head, _, _ = body.partition(state.hang_after)
            await response.write((head + state.hang_after).encode("utf-8"))
            await _wait(state.release, 10)
            return response

        for chunk in state.chunks(body):
            await response.write(chunk)
            await asyncio.sleep(0)
        await response.write_eof()
        return response

    app = web.Application()
    app.router.add_get("/range/{prefix}", handle_range)
    server = await aiohttp_server(app)
    state.url = str(server.make_url("")).rstrip("/")

    yield state

    state.release.set()


@pytest.fixture
def range_client(range_api) -> RangeClient:
    return RangeClient(range_api.url)


@pytest.fixture
def defaults() -> RequestDefaults:
    """Defaults that keep test requests off any environment proxy."""
    return RequestDefaults({"ignore_env_proxy": True, "timeout": 5})
