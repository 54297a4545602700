"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the settings environment so no local .env file leaks into tests,
and provides an in-memory stand-in for the Pantry service.
"""

import json
import os
from typing import Any, Callable

# CRITICAL: Set this before any imports that might load settings
os.environ["PANTRY_ENV"] = "testing"
os.environ.setdefault("PANTRY_API_KEY", "test-key")

import httpx
import pytest

from pantry.adapters.pantry.http_client import HttpPantryClient
from pantry.adapters.transport.dispatcher import HttpDispatcher

API_KEY = "test-key"


class FakeClock:
    """Deterministic clock; sleeping advances time instead of blocking."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds

    def advance(self, seconds: float) -> None:
        self.current += seconds


class PantryServiceStub:
    """In-memory Pantry API served through httpx.MockTransport.

    Records every request it receives so tests can count network calls.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.baskets: dict[str, dict[str, Any]] = {}
        self.name = "test pantry"
        self.description = "pantry used in tests"
        self.status_override: int | None = None
        self.body_override: bytes | None = None
        self.on_request: Callable[[httpx.Request], None] | None = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def details(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "errors": [],
            "notifications": True,
            "percentFull": 1,
            "baskets": [{"name": name, "ttl": "2592000"} for name in self.baskets],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)

        if self.status_override is not None or self.body_override is not None:
            return httpx.Response(
                self.status_override or 200,
                content=self.body_override or b"",
            )

        parts = request.url.path.split("/")
        # ["", "apiv1", "pantry", "<key>", "basket", "<name>"]
        if len(parts) == 4:
            return self._pantry(request)
        return self._basket(request, parts[5])

    def _pantry(self, request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            update = json.loads(request.content)
            self.name = update["name"]
            self.description = update["description"]
        return httpx.Response(200, json=self.details())

    def _basket(self, request: httpx.Request, name: str) -> httpx.Response:
        if request.method == "POST":
            self.baskets[name] = json.loads(request.content)
            return httpx.Response(200, text=f"Your Pantry was updated with basket: {name}!")

        if name not in self.baskets:
            return httpx.Response(400, text=f"Could not get basket: {name} does not exist")

        if request.method == "PUT":
            self.baskets[name].update(json.loads(request.content))
            return httpx.Response(200, json=self.baskets[name])
        if request.method == "DELETE":
            del self.baskets[name]
            return httpx.Response(200, text=f"{name} was removed from your Pantry!")
        return httpx.Response(200, json=self.baskets[name])


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service() -> PantryServiceStub:
    return PantryServiceStub()


@pytest.fixture
def http_client(service: PantryServiceStub):
    client = httpx.Client(transport=httpx.MockTransport(service.handler))
    yield client
    client.close()


@pytest.fixture
def pantry_client(http_client: httpx.Client) -> HttpPantryClient:
    return HttpPantryClient(API_KEY, dispatcher=HttpDispatcher(http_client=http_client))
