import json

import pytest

import search_query


@pytest.fixture()
def dataset_path(tmp_path):
    rows = [
        {"id": "t1", "platform": "TWITCH", "username": "ruleta_mx", "followers": 150_000, "tags": ["casino"], "region": "MEXICO"},
        {"id": "k1", "platform": "KICK", "username": "slots_mx", "followers": 90_000, "tags": ["slots"], "region": "MEXICO"},
        {"id": "y1", "platform": "YOUTUBE", "username": "minero", "followers": 500_000, "tags": ["minecraft"], "region": "MEXICO"},
        {"id": "t2", "platform": "TWITCH", "username": "casino_co", "followers": 70_000, "tags": ["casino"], "region": "COLOMBIA"},
    ]
    path = tmp_path / "creators.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return str(path)


def test_json_output(dataset_path, capsys):
    exit_code = search_query.main(["casino streamers in Mexico", "--dataset", dataset_path, "--json"])
    data = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert data["criteria"]["regions"] == ["MEXICO"]
    assert {creator["username"] for creator in data["creators"]} == {"ruleta_mx", "slots_mx"}
    assert data["total_count"] == 2


def test_text_output(dataset_path, capsys):
    exit_code = search_query.main(["casino streamers in Mexico", "--dataset", dataset_path])
    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Page 1/1 (2 total)" in out
    assert "Username: ruleta_mx (twitch)" in out


def test_no_results_exit_code(dataset_path, capsys):
    assert search_query.main(["chess streamers", "--dataset", dataset_path]) == 1
    assert "No results found." in capsys.readouterr().out


def test_missing_source_exit_code(capsys):
    assert search_query.main(["casino"]) == 2
    assert "Either --dataset or --db-path is required" in capsys.readouterr().err
