import json
import logging
import os
import threading
import time
from collections import deque
from typing import Any

import pytest

from wbmap.backend.interface import NetworkClient
from wbmap.client import Client
from wbmap.errors import TransportError

TOKEN = "insertokenhere"


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for all test sessions"""
    log_level_str = os.getenv("TEST_LOG_LEVEL", "INFO")
    log_level = logging.DEBUG if log_level_str == 'DEBUG' else logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
        force=True
    )


class FakeNetworkClient(NetworkClient):
    """Replays queued responses and records every request made."""

    def __init__(self, delay: float = 0.0) -> None:
        self.responses: deque = deque()
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.delay = delay
        self._lock = threading.Lock()

    def add_response(self, data: Any) -> None:
        raw = data if isinstance(data, str) else json.dumps(data)
        self.responses.append(raw.encode("utf-8"))

    def add_error(self, error: Exception) -> None:
        self.responses.append(error)

    def get(self, args: dict[str, str]) -> bytes:
        return self._next("GET", args)

    def post(self, args: dict[str, str]) -> bytes:
        return self._next("POST", args)

    def _next(self, method: str, args: dict[str, str]) -> bytes:
        with self._lock:
            self.calls.append((method, dict(args)))
            response = self.responses.popleft() if self.responses else TransportError("No response queued")
        if self.delay:
            time.sleep(self.delay)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def most_recent_args(self) -> dict[str, str]:
        return self.calls[-1][1]

    @property
    def actions(self) -> list[str]:
        return [args.get("action") for _, args in self.calls]


@pytest.fixture
def network() -> FakeNetworkClient:
    return FakeNetworkClient()


@pytest.fixture
def client(network: FakeNetworkClient) -> Client:
    """Client whose edit token is already known."""
    wikibase = Client(network)
    wikibase.tokens.set(TOKEN)
    return wikibase


def search_response(*results: tuple[str, str]) -> dict:
    """wbsearch response for (title, displaytext) pairs."""
    return {
        "batchcomplete": "",
        "query": {
            "wbsearch": [
                {"ns": 120, "title": title, "pageid": 100 + index, "displaytext": text}
                for index, (title, text) in enumerate(results)
            ]
        },
    }


def entity_response(entity_id: str, label: str = "hello", claims: Any = None) -> dict:
    """wbeditentity success response."""
    return {
        "entity": {
            "aliases": {},
            "claims": claims if claims is not None else {},
            "descriptions": {},
            "id": entity_id,
            "labels": {"en": {"language": "en", "value": label}},
            "lastrevid": 55,
            "sitelinks": {},
            "type": "item" if entity_id.startswith("Q") else "property",
        },
        "success": 1,
    }


def claim_response(claim_id: str, property_id: str = "P14") -> dict:
    """wbcreateclaim / wbsetclaimvalue success response."""
    return {
        "pageinfo": {"lastrevid": 460},
        "success": 1,
        "claim": {
            "mainsnak": {
                "snaktype": "value",
                "property": property_id,
                "hash": "db735571fef70e4d199d40fe10609312fa8e5fa9",
                "datavalue": {"value": "wot!", "type": "string"},
                "datatype": "string",
            },
            "type": "statement",
            "id": claim_id,
            "rank": "normal",
        },
    }


def error_response(code: str, info: str) -> dict:
    return {"error": {"code": code, "info": info, "*": "See api.php for API usage."}}
