from __future__ import annotations

from six_degrees.infra.steam import parse_app_details


def test_parse_app_details_maps_fields() -> None:
    data = {
        "type": "Game",
        "name": " Portal 2 ",
        "header_image": "",
        "capsule_image": "https://cdn.example.com/capsule.jpg",
        "release_date": {"coming_soon": False, "date": "18 Apr, 2011"},
        "genres": [{"id": "1", "description": "Action"}, {"id": "25", "description": "Adventure"}],
        "categories": [{"id": 2, "description": "Single-player"}, {"id": 9}],
    }

    details = parse_app_details("620", data)

    assert details.appid == "620"
    assert details.app_type == "game"
    assert details.name == "Portal 2"
    assert details.header_image == "https://cdn.example.com/capsule.jpg"
    assert details.release_date == "18 Apr, 2011"
    assert details.genres == ("Action", "Adventure")
    assert details.categories == ("Single-player",)


def test_parse_app_details_tolerates_garbage() -> None:
    details = parse_app_details("1", {"name": 42, "genres": "Action", "release_date": "2020"})

    assert details.name == ""
    assert details.genres == ()
    assert details.release_date == ""
    assert parse_app_details("2", None).name == ""
