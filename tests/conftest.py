"""skinproxy tests configuration."""

import base64
import json
from threading import Thread
from typing import Any, Callable, Generator, Optional

import httpx
import pytest
from fakeredis import TcpFakeServer
from starlette.testclient import TestClient

from skinproxy.cache import CacheSettings, MemoryCacheBackend
from skinproxy.mojang.main import create_app
from skinproxy.mojang.settings import ApiSettings, UpstreamSettings

NOTCH_UUID = "069a79f444e94726a5befca90e38aeec"
NOTCH_SKIN = "http://textures.minecraft.net/texture/292009a4925b58f02c77dadc3ecef07ea4c7472f64e0fdc32ce5522489362680"
NOTCH_CAPE = "http://textures.minecraft.net/texture/2340c0e03dd24a11b15a8b33c2a7e9e32abb2051b2481d0ba7defd635ca7a933"
JEB_UUID = "853c80ef3c3749fdaa49938b674adae6"
JEB_SKIN = "http://textures.minecraft.net/texture/7fd9ba42a7c81eeea22f1524271ae85a8e045ce0af5a6ae16c6406ae917e68b5"

SKIN_PNG = b"\x89PNG\r\n\x1a\nskin"
CAPE_PNG = b"\x89PNG\r\n\x1a\ncape"


def encode_textures(
    skin: Optional[str] = None,
    cape: Optional[str] = None,
    uuid: str = NOTCH_UUID,
    name: str = "Notch",
) -> str:
    """Build a base64 ``textures`` property value."""
    textures: dict[str, Any] = {}
    if skin:
        textures["SKIN"] = {"url": skin}
    if cape:
        textures["CAPE"] = {"url": cape}

    payload = {
        "timestamp": 1700000000000,
        "profileId": uuid,
        "profileName": name,
        "textures": textures,
    }
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def make_profile(
    uuid: str, name: str, skin: Optional[str] = None, cape: Optional[str] = None
) -> dict[str, Any]:
    """Build a session server profile."""
    return {
        "id": uuid,
        "name": name,
        "properties": [
            {
                "name": "textures",
                "value": encode_textures(skin, cape, uuid=uuid, name=name),
            }
        ],
        "profileActions": [],
    }


class FakeMojang:
    """In-process stand-in for the Mojang services, served via httpx.MockTransport."""

    def __init__(self):
        """Create an empty fake with no players."""
        self.users: dict[str, str] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.images: dict[str, bytes] = {}
        self.requests: list[str] = []
        self.fail = False

    def add_player(
        self,
        name: str,
        uuid: str,
        skin: Optional[str] = None,
        cape: Optional[str] = None,
    ) -> dict[str, Any]:
        """Register a player and return its profile."""
        self.users[name] = uuid
        self.profiles[uuid] = make_profile(uuid, name, skin, cape)
        return self.profiles[uuid]

    def calls(self, fragment: str) -> int:
        """Count requests whose URL contains ``fragment``."""
        return sum(fragment in url for url in self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        """Answer an upstream request."""
        url = str(request.url)
        self.requests.append(url)

        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path.startswith("/users/profiles/minecraft/"):
            name = path.rsplit("/", 1)[1]
            if name in self.users:
                return httpx.Response(200, json={"id": self.users[name], "name": name})
            return httpx.Response(204)

        if path.startswith("/session/minecraft/profile/"):
            uuid = path.rsplit("/", 1)[1]
            if uuid in self.profiles:
                return httpx.Response(200, json=self.profiles[uuid])
            return httpx.Response(204)

        if url in self.images:
            return httpx.Response(
                200,
                content=self.images[url],
                headers={"Content-Type": "image/png", "ETag": '"abc"'},
            )

        return httpx.Response(404)


@pytest.fixture
def mojang() -> FakeMojang:
    """Fake upstream with Notch (skin + cape) and jeb_ (skin only)."""
    fake = FakeMojang()
    fake.add_player("Notch", NOTCH_UUID, skin=NOTCH_SKIN, cape=NOTCH_CAPE)
    fake.add_player("jeb_", JEB_UUID, skin=JEB_SKIN)
    fake.images[NOTCH_SKIN] = SKIN_PNG
    fake.images[NOTCH_CAPE] = CAPE_PNG
    fake.images[JEB_SKIN] = SKIN_PNG
    return fake


@pytest.fixture
def http_client(mojang) -> httpx.AsyncClient:
    """HTTP client routed to the fake upstream."""
    return httpx.AsyncClient(transport=httpx.MockTransport(mojang.handler))


@pytest.fixture
def durable_cache() -> MemoryCacheBackend:
    """Durable cache."""
    return MemoryCacheBackend()


@pytest.fixture
def edge_cache() -> MemoryCacheBackend:
    """Edge response cache."""
    return MemoryCacheBackend(default_ttl=3600)


@pytest.fixture
def make_app(
    http_client, durable_cache, edge_cache
) -> Generator[Callable[..., TestClient], Any, Any]:
    """Factory building a test client for given API settings."""
    clients: list[TestClient] = []

    def _make(**api_params) -> TestClient:
        params = {
            "origin_whitelist": "",
            "username_ttl": 86400,
            "profile_ttl": 3600,
            "skin_ttl": 600,
        }
        params.update(api_params)
        application = create_app(
            api_settings=ApiSettings(**params),
            upstream_settings=UpstreamSettings(),
            cache_settings=CacheSettings(),
            durable_cache=durable_cache,
            edge_cache=edge_cache,
            http_client=http_client,
        )
        client = TestClient(application)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def app(make_app) -> TestClient:
    """Create App."""
    return make_app()


@pytest.fixture(scope="session")
def redis_host() -> Generator[tuple[str, int], Any, Any]:
    """FakeRedis fixture."""
    server_address = ("127.0.0.1", 16379)
    server = TcpFakeServer(server_address, server_type="redis")
    t = Thread(target=server.serve_forever, daemon=True)
    t.start()
    yield server_address
    server.shutdown()
    server.server_close()
    t.join()
