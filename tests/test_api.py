"""Tests for the HTTP API."""

from __future__ import annotations

import io
import json

from fastapi.testclient import TestClient
from PIL import Image

from main import build_store
from services.member_store import MemberStore
from services.notifications import Notifier
from services.persistence import MemoryStore


class TestMembersApi:
    """Tests for /api/members."""

    def test_create_and_get(self, client: TestClient):
        response = client.post("/api/members", json={"name": "Amit", "gender": "male", "birthPlace": "Pune"})
        assert response.status_code == 200
        body = response.json()
        assert body["birthPlace"] == "Pune"
        assert body["children"] == []
        assert body["createdAt"]

        fetched = client.get(f"/api/members/{body['id']}").json()
        assert fetched == body

    def test_create_blank_name(self, client: TestClient, store: MemberStore):
        response = client.post("/api/members", json={"name": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Please enter a name"
        assert len(store) == 0

        notifications = client.get("/api/notifications").json()
        assert notifications[-1]["type"] == "error"

    def test_update_and_missing(self, client: TestClient, family: dict):
        response = client.put(f"/api/members/{family['son']}", json={"occupation": "Pilot"})
        assert response.status_code == 200
        assert response.json()["occupation"] == "Pilot"
        assert response.json()["name"] == "Amit Kumar"

        assert client.put("/api/members/nope", json={"name": "X"}).status_code == 404
        assert client.get("/api/members/nope").status_code == 404

    def test_update_clears_relation_with_null(self, client: TestClient, family: dict):
        response = client.put(f"/api/members/{family['son']}", json={"mother": None})
        assert response.json()["mother"] is None
        assert response.json()["father"] == family["dad"]

    def test_delete_is_idempotent(self, client: TestClient, store: MemberStore, family: dict):
        first = client.delete(f"/api/members/{family['dad']}")
        second = client.delete(f"/api/members/{family['dad']}")

        assert first.json()["existed"] is True
        assert second.status_code == 200
        assert second.json()["existed"] is False
        assert all(m.father != family["dad"] for m in store.members)

    def test_list_search_and_sort(self, client: TestClient, family: dict):
        names = [m["name"] for m in client.get("/api/members", params={"q": "kumar"}).json()]
        assert names == ["Amit Kumar", "Kiran Kumar", "Priya Kumar", "Rajesh Kumar", "Sushma Kumar"]

        cards = client.get("/api/members/cards", params={"q": "developer"}).json()
        assert [c["initials"] for c in cards] == ["AK"]
        assert cards[0]["parentsCount"] == 2

    def test_details_select_member(self, client: TestClient, store: MemberStore, family: dict):
        details = client.get(f"/api/members/{family['dad']}/details").json()
        assert details["children"] == "Amit Kumar, Priya Kumar"
        assert store.view.selected_member_id == family["dad"]

    def test_candidates(self, client: TestClient, family: dict):
        fathers = client.get("/api/members/candidates/father", params={"exclude": family["son"]}).json()
        assert [m["id"] for m in fathers] == [family["dad"]]
        assert client.get("/api/members/candidates/uncle").status_code == 422

    def test_photo_upload(self, client: TestClient):
        buffer = io.BytesIO()
        Image.new("RGB", (10, 10), "blue").save(buffer, "PNG")
        response = client.post("/api/members/photo",
                               files={"file": ("me.png", buffer.getvalue(), "image/png")})
        assert response.status_code == 200
        assert response.json()["photo"].startswith("data:image/png;base64,")

        bad = client.post("/api/members/photo", files={"file": ("me.png", b"nope", "image/png")})
        assert bad.status_code == 400


class TestTreeApi:
    """Tests for /api/tree."""

    def test_render_tree(self, client: TestClient, family: dict):
        body = client.get("/api/tree").json()

        assert body["empty"] is False
        roots = [node["member"]["id"] for node in body["forest"]]
        assert roots == [family["dad"], family["mum"]]
        son = body["forest"][0]["children"][0]
        assert son["member"]["id"] == family["son"]
        assert son["children"][0]["member"]["name"] == "Kiran Kumar"

    def test_toggle_collapses(self, client: TestClient, family: dict):
        body = client.post(f"/api/tree/toggle/{family['son']}").json()
        son = body["forest"][0]["children"][0]
        assert son["collapsed"] is True
        assert son["children"] is None
        assert body["view"]["collapsedNodes"] == [family["son"]]

        body = client.post("/api/tree/expand-all").json()
        assert body["view"]["collapsedNodes"] == []

        body = client.post("/api/tree/collapse-all").json()
        assert all(node["children"] is None for node in body["forest"])

    def test_select_zoom_and_view(self, client: TestClient, family: dict):
        assert client.post(f"/api/tree/select/{family['mum']}").status_code == 200
        assert client.post("/api/tree/select/ghost").status_code == 404
        assert client.post("/api/tree/zoom-in").json() == {"treeZoom": 1.2}
        assert client.post("/api/tree/zoom-out").json() == {"treeZoom": 1.0}
        assert client.post("/api/tree/view", json={"view": "list"}).json() == {"currentView": "list"}

    def test_stats(self, client: TestClient, family: dict):
        stats = client.get("/api/tree/stats").json()
        assert stats == {"total": 5, "male": 2, "female": 2, "other": 1, "generations": 3}

    def test_print_png(self, client: TestClient, family: dict, tmp_path, monkeypatch):
        from services import export_service
        monkeypatch.setattr(export_service, "EXPORTS_DIR", tmp_path)

        response = client.post("/api/tree/print", json={"format": "png", "width": 400, "height": 300})

        assert response.status_code == 200
        assert response.content.startswith(b"\x89PNG")


class TestDataApi:
    """Tests for /api/data."""

    def test_export_import_round_trip(self, client: TestClient, store: MemberStore, family: dict):
        before = store.members
        exported = client.get("/api/data/export")
        assert exported.status_code == 200
        assert "attachment" in exported.headers["content-disposition"]
        assert exported.json()["metadata"]["memberCount"] == 5

        client.post("/api/data/clear")
        assert len(store) == 0

        response = client.post("/api/data/import",
                               files={"file": ("tree.json", exported.content, "application/json")})
        assert response.json() == {"status": "imported", "members": 5}
        assert store.members == before

    def test_bad_import_leaves_data_untouched(self, client: TestClient, store: MemberStore, family: dict):
        before = store.members
        for payload in (b"not json", json.dumps({"people": []}).encode(), json.dumps({"members": 3}).encode()):
            response = client.post("/api/data/import", files={"file": ("x.json", payload, "application/json")})
            assert response.status_code == 400
        assert store.members == before

    def test_sample_and_theme(self, client: TestClient, store: MemberStore):
        assert client.post("/api/data/sample").json()["members"] == 4
        assert client.get("/api/data/theme").json() == {"theme": "light"}
        assert client.post("/api/data/theme/toggle").json() == {"theme": "dark"}
        assert store.view.theme == "dark"

    def test_notifications_are_drained(self, client: TestClient):
        client.post("/api/members", json={"name": "Amit"})
        first = client.get("/api/notifications").json()
        assert first[-1] == {**first[-1], "type": "success", "message": "Amit added to family tree"}
        assert client.get("/api/notifications").json() == []


class TestStartup:
    """Tests for building the store at startup."""

    def test_seeds_sample_family_when_empty(self):
        store = build_store(Notifier(), kv_store=MemoryStore(), seed_sample=True)
        assert len(store) == 4

    def test_keeps_saved_data(self):
        kv = MemoryStore()
        first = build_store(Notifier(), kv_store=kv, seed_sample=False)
        first.create({"name": "Only One"})

        second = build_store(Notifier(), kv_store=kv, seed_sample=True)
        assert [m.name for m in second.members] == ["Only One"]

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy", "members": 0}
