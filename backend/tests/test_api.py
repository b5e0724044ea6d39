"""
REST 接口测试（内存存储）
"""
from __future__ import annotations


def _create_category(client, name="Tools", **extra):
    response = client.post("/api/categories", json={"name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def _create_bookmark(client, category_id, title="Example", **extra):
    payload = {"title": title, "url": f"https://{title.lower()}.example.com", "categoryId": category_id, **extra}
    response = client.post("/api/bookmarks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _find(entries, achievement_type, threshold):
    for entry in entries:
        if entry["achievement"]["type"] == achievement_type and entry["achievement"]["threshold"] == threshold:
            return entry
    raise AssertionError(f"no {achievement_type}/{threshold} entry")


# ==================== 系统 ====================

def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["storage"] == "memory"


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/api/docs"


# ==================== 完整流程 ====================

def test_bookmark_lifecycle_unlocks_first_bookmark(client):
    category = _create_category(client, "Tools")
    assert category["id"] == 1
    assert category["userId"] == 1
    assert category["color"] == "#6366f1"
    assert category["icon"] == "folder"

    bookmark = _create_bookmark(client, category["id"], "Example")
    assert bookmark["id"] == 1
    assert bookmark["visitCount"] == 0
    assert bookmark["lastVisited"] is None
    assert bookmark["categoryId"] == 1

    visit = client.post("/api/bookmarks/1/visit")
    assert visit.status_code == 200
    assert visit.json() == {"message": "Visit recorded", "visitCount": 1}

    fetched = client.get("/api/bookmarks/1").json()
    assert fetched["visitCount"] == 1
    assert fetched["lastVisited"] is not None

    check = client.get("/api/achievements/check")
    assert check.status_code == 200
    first_bookmark = _find(check.json(), "bookmark_count", 1)
    assert first_bookmark["progress"] == 1
    assert first_bookmark["unlockedAt"] is not None
    assert first_bookmark["achievement"]["name"] == "First Bookmark"

    listed = client.get("/api/achievements").json()
    assert len(listed) == 7
    assert _find(listed, "visit_count", 10)["progress"] == 1


def test_achievements_empty_until_checked(client):
    assert client.get("/api/achievements").json() == []


def test_achievement_definitions(client):
    response = client.get("/api/achievements/definitions")

    assert response.status_code == 200
    definitions = response.json()
    assert len(definitions) == 7
    assert {d["type"] for d in definitions} == {"bookmark_count", "category_count", "visit_count"}


# ==================== 分类 ====================

def test_create_category_requires_name(client, mem_storage):
    response = client.post("/api/categories", json={})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Validation error")
    assert mem_storage.categories == {}
    assert client.get("/api/categories").json() == []


def test_create_category_rejects_empty_name(client):
    response = client.post("/api/categories", json={"name": ""})

    assert response.status_code == 400
    assert "name" in response.json()["message"]


def test_categories_listed_in_position_order(client):
    _create_category(client, "B", position=2)
    _create_category(client, "A", position=1)

    names = [c["name"] for c in client.get("/api/categories").json()]

    assert names == ["A", "B"]


def test_update_category(client):
    category = _create_category(client, "Tools")

    response = client.patch(f"/api/categories/{category['id']}", json={"color": "#000000"})

    assert response.status_code == 200
    assert response.json()["color"] == "#000000"
    assert response.json()["name"] == "Tools"


def test_update_missing_category(client):
    response = client.patch("/api/categories/42", json={"name": "x"})

    assert response.status_code == 404
    assert response.json() == {"message": "Category not found"}


def test_delete_category_reports_removed_bookmarks(client):
    category = _create_category(client, "Tools")
    keep = _create_category(client, "Keep")
    _create_bookmark(client, category["id"], "One")
    _create_bookmark(client, category["id"], "Two")
    survivor = _create_bookmark(client, keep["id"], "Three")

    response = client.delete(f"/api/categories/{category['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Category deleted successfully", "deletedBookmarksCount": 2}
    assert [b["id"] for b in client.get("/api/bookmarks").json()] == [survivor["id"]]
    assert client.get(f"/api/bookmarks/category/{category['id']}").json() == []


def test_delete_missing_category(client):
    response = client.delete("/api/categories/9999")

    assert response.status_code == 404


# ==================== 书签 ====================

def test_create_bookmark_with_unknown_category(client, mem_storage):
    response = client.post("/api/bookmarks", json={"title": "x", "url": "https://x.com", "categoryId": 77})

    assert response.status_code == 400
    assert response.json() == {"message": "Category 77 does not exist"}
    assert mem_storage.bookmarks == {}


def test_create_bookmark_with_unknown_section(client):
    category = _create_category(client)

    response = client.post(
        "/api/bookmarks",
        json={"title": "x", "url": "https://x.com", "categoryId": category["id"], "sectionId": 5},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Section 5 does not exist"}


def test_create_bookmark_missing_fields(client):
    response = client.post("/api/bookmarks", json={"title": "x"})

    assert response.status_code == 400
    message = response.json()["message"]
    assert "url" in message
    assert "categoryId" in message


def test_snake_case_input_is_accepted(client):
    category = _create_category(client)

    response = client.post(
        "/api/bookmarks",
        json={"title": "x", "url": "https://x.com", "category_id": category["id"]},
    )

    assert response.status_code == 201
    assert response.json()["categoryId"] == category["id"]


def test_update_bookmark_partial(client):
    category = _create_category(client)
    bookmark = _create_bookmark(client, category["id"], "Example", description="before")

    response = client.patch(f"/api/bookmarks/{bookmark['id']}", json={"title": "Renamed"})

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Renamed"
    assert body["description"] == "before"
    assert body["url"] == bookmark["url"]


def test_update_bookmark_clears_section(client):
    category = _create_category(client)
    section = client.post("/api/sections", json={"name": "Work"}).json()
    bookmark = _create_bookmark(client, category["id"], sectionId=section["id"])
    assert bookmark["sectionId"] == section["id"]

    response = client.patch(f"/api/bookmarks/{bookmark['id']}", json={"sectionId": None})

    assert response.status_code == 200
    assert response.json()["sectionId"] is None


def test_update_bookmark_cannot_touch_visit_count(client):
    category = _create_category(client)
    bookmark = _create_bookmark(client, category["id"])

    response = client.patch(f"/api/bookmarks/{bookmark['id']}", json={"title": "t", "visitCount": 99})

    assert response.status_code == 200
    assert response.json()["visitCount"] == 0


def test_update_bookmark_to_unknown_category(client):
    category = _create_category(client)
    bookmark = _create_bookmark(client, category["id"])

    response = client.patch(f"/api/bookmarks/{bookmark['id']}", json={"categoryId": 404})

    assert response.status_code == 400


def test_delete_bookmark(client):
    category = _create_category(client)
    bookmark = _create_bookmark(client, category["id"])

    response = client.delete(f"/api/bookmarks/{bookmark['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Bookmark deleted successfully"}
    assert client.get(f"/api/bookmarks/{bookmark['id']}").status_code == 404


def test_delete_missing_bookmark(client):
    response = client.delete("/api/bookmarks/9999")

    assert response.status_code == 404
    assert response.json() == {"message": "Bookmark not found"}


def test_visit_missing_bookmark(client):
    response = client.post("/api/bookmarks/9999/visit")

    assert response.status_code == 404


def test_non_numeric_id_is_rejected(client):
    assert client.get("/api/bookmarks/abc").status_code == 400
    assert client.delete("/api/categories/abc").status_code == 400
    assert client.post("/api/bookmarks/abc/visit").status_code == 400


def test_other_users_rows_are_hidden(client, mem_storage):
    category = _create_category(client)
    bookmark = _create_bookmark(client, category["id"])
    mem_storage.bookmarks[bookmark["id"]].user_id = 2

    assert client.get("/api/bookmarks").json() == []
    assert client.get(f"/api/bookmarks/category/{category['id']}").json() == []
    assert client.get(f"/api/bookmarks/{bookmark['id']}").status_code == 404
    assert client.post(f"/api/bookmarks/{bookmark['id']}/visit").status_code == 404


def test_bookmarks_by_category(client):
    tools = _create_category(client, "Tools")
    news = _create_category(client, "News")
    _create_bookmark(client, tools["id"], "A")
    _create_bookmark(client, news["id"], "B")

    response = client.get(f"/api/bookmarks/category/{tools['id']}")

    assert [b["title"] for b in response.json()] == ["A"]


# ==================== 分区 ====================

def test_section_flow(client):
    category = _create_category(client)
    created = client.post("/api/sections", json={"name": "Work", "isDefault": True})
    assert created.status_code == 201
    section = created.json()
    assert section["icon"] == "layout"
    assert section["color"] == "#0ea5e9"
    assert section["isDefault"] is True

    _create_bookmark(client, category["id"], "One", sectionId=section["id"])
    _create_bookmark(client, category["id"], "Two", sectionId=section["id"])
    assert len(client.get(f"/api/bookmarks/section/{section['id']}").json()) == 2

    updated = client.patch(f"/api/sections/{section['id']}", json={"name": "Office"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Office"
    assert [s["name"] for s in client.get("/api/sections").json()] == ["Office"]

    deleted = client.delete(f"/api/sections/{section['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Section deleted successfully", "updatedBookmarksCount": 2}

    bookmarks = client.get("/api/bookmarks").json()
    assert len(bookmarks) == 2
    assert all(b["sectionId"] is None for b in bookmarks)


def test_delete_missing_section(client):
    assert client.delete("/api/sections/9999").status_code == 404


# ==================== 用户 ====================

def test_get_current_user(client):
    response = client.get("/api/users/me")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    assert body["username"] == "demo"
    assert "password" not in body


def test_update_current_user(client):
    response = client.patch("/api/users/me", json={"theme": "dark", "settings": {"compact": True}})

    assert response.status_code == 200
    body = response.json()
    assert body["theme"] == "dark"
    assert body["settings"] == {"compact": True}
    assert "password" not in body

    cleared = client.patch("/api/users/me", json={"email": None})
    assert cleared.json()["email"] is None
    assert cleared.json()["theme"] == "dark"
