def _add_book(client, child_id, **fields):
    payload = {"child_id": child_id, "title": "O Principezinho", "genre": "FANTASIA"}
    payload.update(fields)
    response = client.post("/api/books", json=payload)
    assert response.status_code == 201
    return response.json()


def test_finished_book_awards_first_achievement_once(client, child_id):
    body = _add_book(client, child_id, status="finished", rating=5)

    assert body["book"]["finish_date"]
    assert body["book"]["author"] == "Desconhecido"
    assert [a["code"] for a in body["new_achievements"]] == ["primeiro-livro"]

    check = client.post(f"/api/achievements/check/{child_id}").json()
    assert check == {"new_achievements": [], "count": 0}


def test_unfinished_book_does_not_trigger_a_check(client, child_id):
    body = _add_book(client, child_id, status="to-read")
    assert body["new_achievements"] == []
    assert body["book"]["finish_date"] is None
    assert body["book"]["recommended"] is False


def test_finishing_through_update_stamps_finish_date(client, child_id):
    book = _add_book(client, child_id, status="reading")["book"]

    response = client.put(f"/api/books/{book['id']}", json={"status": "finished", "rating": 4})
    assert response.status_code == 200
    body = response.json()
    assert body["book"]["status"] == "finished"
    assert body["book"]["finish_date"]
    assert [a["code"] for a in body["new_achievements"]] == ["primeiro-livro"]

    again = client.put(f"/api/books/{book['id']}", json={"notes": "Adorei"}).json()
    assert again["new_achievements"] == []


def test_list_books_filters_by_status(client, child_id):
    _add_book(client, child_id, title="A", status="finished")
    _add_book(client, child_id, title="B", status="to-read")

    all_books = client.get(f"/api/books/child/{child_id}").json()
    finished = client.get(f"/api/books/child/{child_id}", params={"status": "finished"}).json()
    assert len(all_books) == 2
    assert [book["title"] for book in finished] == ["A"]


def test_invalid_book_payload_rejected(client, child_id):
    response = client.post(
        "/api/books",
        json={"child_id": child_id, "title": "X", "genre": "POESIA"},
    )
    assert response.status_code == 422
    response = client.post(
        "/api/books",
        json={"child_id": child_id, "title": "X", "genre": "FANTASIA", "rating": 6},
    )
    assert response.status_code == 422


def test_unknown_resources_are_404(client, child_id):
    assert client.get("/api/books/999").status_code == 404
    assert client.delete("/api/books/999").status_code == 404
    assert client.get("/api/children/999").status_code == 404
    assert client.get("/api/family/999").status_code == 404
    assert client.post("/api/books", json={"child_id": 999, "title": "X", "genre": "OCEANO"}).status_code == 404


def test_duplicate_family_email_conflicts(client, family_id):
    response = client.post("/api/family", json={"name": "Outra", "email": "silva@example.com"})
    assert response.status_code == 409


def test_child_defaults_and_level(client, child_id):
    child = client.get(f"/api/children/{child_id}").json()
    assert child["level_category"] == "EXPLORERS"
    assert child["book_count"] == 0
    assert child["level"]["current"]["name"] == "Curioso"
    assert child["level"]["books_to_next_level"] == 3


def test_family_full_includes_books_and_achievements(client, family_id, child_id):
    _add_book(client, child_id, status="finished")
    family = client.get(f"/api/family/{family_id}/full").json()
    assert family["settings"]["notifications"] is True
    [child] = family["children"]
    assert child["book_count"] == 1
    assert [a["code"] for a in child["achievements"]] == ["primeiro-livro"]


def test_child_achievements_overview(client, child_id):
    _add_book(client, child_id, status="finished")
    body = client.get(f"/api/achievements/child/{child_id}").json()
    assert body["total_available"] == 15
    assert body["total_earned"] == 1
    earned = [a for a in body["achievements"] if a["earned"]]
    assert [a["code"] for a in earned] == ["primeiro-livro"]
    assert earned[0]["earned_at"]


def test_catalog_listing_groups_by_category(client):
    catalog = client.get("/api/achievements").json()
    categories = [a["category"] for a in catalog]
    assert categories == sorted(categories, key=["READING", "GENRE", "STREAK", "SPECIAL"].index)
