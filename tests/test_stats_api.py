import io
import zipfile


def _finish(client, child_id, genre, rating=None, **fields):
    payload = {"child_id": child_id, "title": f"Livro {genre}", "genre": genre, "status": "finished"}
    if rating is not None:
        payload["rating"] = rating
    payload.update(fields)
    response = client.post("/api/books", json=payload)
    assert response.status_code == 201
    return response.json()


def _add_child(client, family_id, name, **fields):
    response = client.post("/api/children", json={"family_id": family_id, "name": name, **fields})
    assert response.status_code == 201
    return response.json()["id"]


def test_three_genres_in_a_month(client, child_id):
    earned = []
    for genre, rating in (("FANTASIA", 5), ("OCEANO", 4), ("ESPACO", 3)):
        earned.extend(a["code"] for a in _finish(client, child_id, genre, rating)["new_achievements"])
    assert earned == ["primeiro-livro", "explorador-generos", "super-leitor"]

    stats = client.get(f"/api/stats/child/{child_id}").json()
    assert stats["level"]["current"]["rank"] == 2
    assert stats["level"]["progress"] == 0
    assert stats["books"]["finished"] == 3
    assert stats["books"]["this_month"] == 3
    assert stats["books"]["average_rating"] == 4
    assert stats["genres"]["discovered"] == 3
    assert stats["genres"]["total"] == 8
    assert [g["genre"] for g in stats["genres"]["stats"]][:3] == ["FANTASIA", "AVENTURA", "ESPACO"]
    assert stats["achievements"]["earned"] == 3
    assert len(stats["achievements"]["recent"]) == 3


def test_reading_log_feeds_the_map(client, child_id):
    book = client.post(
        "/api/books",
        json={"child_id": child_id, "title": "Os Cinco", "genre": "AVENTURA", "total_pages": 100},
    ).json()["book"]

    response = client.post(
        "/api/reading-logs",
        json={"child_id": child_id, "book_id": book["id"], "minutes": 20, "pages": 30, "mood": 4},
    )
    assert response.status_code == 201
    assert response.json()["session"]["minutes"] == 20

    updated = client.get(f"/api/books/{book['id']}").json()
    assert updated["current_page"] == 30
    assert updated["status"] == "reading"

    entry = client.get(f"/api/map/child/{child_id}").json()
    assert entry["child"]["id"] == child_id
    assert entry["today_minutes"] == 20
    assert entry["daily_goal"] == 20
    assert entry["streak"] == 1
    assert entry["total_reading_days"] == 1
    assert entry["total_hours"] == 0
    assert entry["rank"] == 1

    sessions = client.get(f"/api/reading-logs/child/{child_id}").json()
    assert [s["book_title"] for s in sessions] == ["Os Cinco"]


def test_reading_log_caps_pages_and_checks_ownership(client, family_id, child_id):
    book = client.post(
        "/api/books",
        json={"child_id": child_id, "title": "Curto", "genre": "CIENCIA", "total_pages": 10},
    ).json()["book"]
    client.post("/api/reading-logs", json={"child_id": child_id, "book_id": book["id"], "minutes": 5, "pages": 50})
    assert client.get(f"/api/books/{book['id']}").json()["current_page"] == 10

    sibling = _add_child(client, family_id, "Rui")
    response = client.post("/api/reading-logs", json={"child_id": sibling, "book_id": book["id"], "minutes": 5})
    assert response.status_code == 404

    response = client.post("/api/reading-logs", json={"child_id": child_id, "minutes": 0})
    assert response.status_code == 422


def test_family_map_aggregates_children(client, family_id, child_id):
    sibling = _add_child(client, family_id, "Rui", level_category="SPACE")
    client.post("/api/reading-logs", json={"child_id": child_id, "minutes": 30})
    client.post("/api/reading-logs", json={"child_id": sibling, "minutes": 15})

    body = client.get(f"/api/map/family/{family_id}").json()
    assert [c["name"] for c in body["children"]] == ["Inês", "Rui"]
    assert body["aggregated"]["today_minutes"] == 45
    assert body["aggregated"]["daily_goal"] == 40
    assert body["aggregated"]["streak"] == 1
    assert body["children"][1]["level"]["current"]["name"] == "Cadete"


def test_family_map_without_children(client, family_id):
    body = client.get(f"/api/map/family/{family_id}").json()
    assert body["children"] == []
    assert body["aggregated"] is None


def test_leaderboard_periods(client, family_id, child_id):
    sibling = _add_child(client, family_id, "Rui")
    _finish(client, child_id, "FANTASIA")
    _finish(client, child_id, "OCEANO")
    _finish(client, sibling, "HISTORIA")
    _finish(client, sibling, "CIENCIA", finish_date="2020-01-01T10:00:00Z")
    _finish(client, sibling, "NATUREZA", finish_date="2020-02-01T10:00:00Z")

    week = client.get(f"/api/stats/leaderboard/{family_id}", params={"period": "week"}).json()
    assert week["period"] == "week"
    assert [(e["name"], e["book_count"]) for e in week["leaderboard"]] == [("Inês", 2), ("Rui", 1)]

    all_time = client.get(f"/api/stats/leaderboard/{family_id}").json()
    assert [(e["name"], e["book_count"]) for e in all_time["leaderboard"]] == [("Rui", 3), ("Inês", 2)]

    response = client.get(f"/api/stats/leaderboard/{family_id}", params={"period": "decade"})
    assert response.status_code == 400


def test_family_stats(client, family_id, child_id):
    _finish(client, child_id, "FANTASIA")
    _finish(client, child_id, "FANTASIA")
    body = client.get(f"/api/stats/family/{family_id}").json()
    assert body["totals"] == {"children": 1, "books": 2, "achievements": 1, "genres_discovered": 1}
    assert len(body["monthly_stats"]) == 6
    assert body["monthly_stats"][-1]["count"] == 2
    assert body["genre_stats"] == [{"genre": "FANTASIA", "count": 2}]


def test_backup_download(client, family_id):
    response = client.get("/api/admin/backup")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        names = set(archive.namelist())
    assert {"manifest.json", "passaporte.db", "config.toml"} <= names


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "healthy"
