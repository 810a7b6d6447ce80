"""HTTP エンドポイントのパラメータ解釈とエラー応答を検証する。"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from six_degrees.api import create_app
from six_degrees.core.metadata import ItemKind, ItemMetadata
from six_degrees.core.ranking import DiversityRankerError
from six_degrees.infra.steam import SteamRequestError
from six_degrees.shared.exceptions import Result

HADES = ItemMetadata(
    id="1145360",
    kind=ItemKind.GAME,
    title="Hades",
    image_url="https://cdn.example.com/hades.jpg",
    release_year=2020,
    tags=frozenset({"Action", "Roguelike"}),
)
CELESTE = ItemMetadata(id="504230", kind=ItemKind.GAME, title="Celeste", release_year=2018)


class StubTagResolver:
    def __init__(self, games: list[ItemMetadata] | None = None, error: Exception | None = None):
        self.games = games or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def find_candidates(self, tag: str, limit: int) -> list[ItemMetadata]:
        self.calls.append((tag, limit))
        if self.error is not None:
            raise self.error
        return self.games[:limit]


class StubRanker:
    def __init__(self, result: Result[tuple[ItemMetadata, ...], DiversityRankerError]):
        self.result = result
        self.calls: list[dict[str, Any]] = []

    async def select_similar(self, source_id: str, **kwargs: Any):
        self.calls.append({"source_id": source_id, **kwargs})
        return self.result


class StubServices:
    def __init__(self, *, tag_resolver=None, ranker=None, slices: Iterable[str] = ("Roguelike",)):
        self.tag_resolver = tag_resolver or StubTagResolver()
        self.ranker = ranker or StubRanker(Result.ok(()))
        self.slices = tuple(slices)
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


def _client(services: StubServices) -> TestClient:
    return TestClient(create_app(services=services))


def test_slices_lists_configured_tags() -> None:
    client = _client(StubServices(slices=("Roguelike", "Puzzle")))

    response = client.get("/api/six/slices")

    assert response.status_code == 200
    assert response.json() == {"slices": ["Roguelike", "Puzzle"]}


def test_tag_returns_games_payload() -> None:
    resolver = StubTagResolver([HADES, CELESTE])
    client = _client(StubServices(tag_resolver=resolver))

    response = client.get("/api/six/tag", params={"tag": "Roguelike", "limit": "1"})

    assert response.status_code == 200
    assert response.json() == {
        "games": [
            {
                "id": "1145360",
                "kind": "game",
                "title": "Hades",
                "imageUrl": "https://cdn.example.com/hades.jpg",
                "releaseYear": 2020,
                "tags": ["action", "roguelike"],
            }
        ]
    }
    assert resolver.calls == [("Roguelike", 1)]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, 10), ("abc", 10), ("0", 1), ("500", 50), ("25", 25)],
)
def test_tag_limit_is_clamped(raw: str | None, expected: int) -> None:
    resolver = StubTagResolver()
    client = _client(StubServices(tag_resolver=resolver))
    params = {"tag": "Puzzle"}
    if raw is not None:
        params["limit"] = raw

    assert client.get("/api/six/tag", params=params).status_code == 200
    assert resolver.calls == [("Puzzle", expected)]


@pytest.mark.parametrize("params", [{}, {"tag": ""}, {"tag": "   "}])
def test_tag_missing_is_bad_request(params: dict[str, str]) -> None:
    resolver = StubTagResolver()
    client = _client(StubServices(tag_resolver=resolver))

    response = client.get("/api/six/tag", params=params)

    assert response.status_code == 400
    assert response.json() == {"error": "missing_tag"}
    assert resolver.calls == []


def test_tag_with_no_candidates_is_empty_list() -> None:
    client = _client(StubServices(tag_resolver=StubTagResolver([])))

    response = client.get("/api/six/tag", params={"tag": "Nonexistent"})

    assert response.status_code == 200
    assert response.json() == {"games": []}


def test_tag_unexpected_failure_is_server_error() -> None:
    resolver = StubTagResolver(error=RuntimeError("boom"))
    client = _client(StubServices(tag_resolver=resolver))

    response = client.get("/api/six/tag", params={"tag": "Roguelike"})

    assert response.status_code == 500
    assert response.json() == {"error": "boom"}


def test_similar_parses_query_parameters() -> None:
    ranker = StubRanker(Result.ok((CELESTE,)))
    client = _client(StubServices(ranker=ranker))

    response = client.get(
        "/api/six/similar/620",
        params={
            "exclude": "1, 2,,3",
            "limit": "99",
            "max_overlap": "1.5",
            "prefer_diverse": "false",
            "goal": " 440 ",
        },
    )

    assert response.status_code == 200
    assert [game["id"] for game in response.json()["games"]] == ["504230"]
    assert ranker.calls == [
        {
            "source_id": "620",
            "exclude": ["1", "2", "3"],
            "limit": 20,
            "max_overlap": 0.99,
            "prefer_diverse": False,
            "goal_id": "440",
        }
    ]


def test_similar_defaults() -> None:
    ranker = StubRanker(Result.ok(()))
    client = _client(StubServices(ranker=ranker))

    response = client.get("/api/six/similar/620", params={"max_overlap": "nan"})

    assert response.json() == {"games": []}
    call = ranker.calls[0]
    assert call["exclude"] == []
    assert call["limit"] == 10
    assert call["max_overlap"] == 0.85
    assert call["prefer_diverse"] is True
    assert call["goal_id"] is None


def test_similar_invalid_id_is_bad_request() -> None:
    ranker = StubRanker(Result.ok(()))
    client = _client(StubServices(ranker=ranker))

    response = client.get("/api/six/similar/not-a-number")

    assert response.status_code == 400
    assert response.json() == {"error": "invalid_id"}
    assert ranker.calls == []


def test_similar_upstream_error_is_server_error() -> None:
    error = DiversityRankerError(str(SteamRequestError("Steam request failed with status 503")))
    client = _client(StubServices(ranker=StubRanker(Result.err(error))))

    response = client.get("/api/six/similar/620")

    assert response.status_code == 500
    assert response.json() == {"error": "Steam request failed with status 503"}


def test_injected_services_are_not_closed_on_shutdown() -> None:
    services = StubServices()

    with TestClient(create_app(services=services)) as client:
        assert client.get("/api/six/slices").status_code == 200

    assert services.closed is False


def test_request_id_is_echoed_or_generated() -> None:
    client = _client(StubServices())

    echoed = client.get("/api/six/slices", headers={"X-Request-ID": "abc123"})
    generated = client.get("/api/six/slices")

    assert echoed.headers["X-Request-ID"] == "abc123"
    assert len(generated.headers["X-Request-ID"]) == 16
