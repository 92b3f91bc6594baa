"""Tests for the tender, sharing and draft routes."""
from conftest import OUTSIDER, OWNER, TEAMMATE, auth


class TestTenderCrud:
    def test_requires_user_header(self, client):
        response = client.get("/tenders")
        assert response.status_code == 401
        assert response.json() == {"error": "Missing X-User-Id header"}

    def test_create_and_get(self, client, sample_tender):
        assert sample_tender["status"] == "open"
        assert sample_tender["user_id"] == OWNER
        assert sample_tender["deadline"] == "2030-03-15"

        response = client.get(f"/tenders/{sample_tender['id']}", headers=auth())
        assert response.status_code == 200
        assert response.json()["title"] == "Municipal Website Redesign"

    def test_create_rejects_missing_client(self, client):
        response = client.post("/tenders", json={"title": "No client"}, headers=auth())
        assert response.status_code == 422
        assert "error" in response.json()

    def test_create_rejects_unknown_status(self, client):
        response = client.post(
            "/tenders",
            json={"title": "T", "client_name": "C", "status": "archived"},
            headers=auth(),
        )
        assert response.status_code == 422

    def test_update_status(self, client, sample_tender):
        response = client.patch(
            f"/tenders/{sample_tender['id']}",
            json={"status": "running", "progress": 40},
            headers=auth(),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "running"
        assert body["progress"] == 40
        assert body["title"] == sample_tender["title"]

    def test_update_cannot_clear_title(self, client, sample_tender):
        response = client.patch(f"/tenders/{sample_tender['id']}", json={"title": None}, headers=auth())
        assert response.status_code == 400

    def test_update_rejects_blank_title_and_client(self, client, sample_tender):
        tender_id = sample_tender["id"]
        response = client.patch(f"/tenders/{tender_id}", json={"title": ""}, headers=auth())
        assert response.status_code == 422
        response = client.patch(f"/tenders/{tender_id}", json={"client_name": "   "}, headers=auth())
        assert response.status_code == 400

        # the stored tender is untouched and still readable everywhere
        assert client.get(f"/tenders/{tender_id}", headers=auth()).json()["title"] == sample_tender["title"]
        assert client.get("/tenders", headers=auth()).status_code == 200
        assert client.get("/dashboard", headers=auth()).status_code == 200

    def test_all_fields_survive_create_and_update(self, client):
        payload = {
            "title": "Data Platform Modernisation",
            "client_name": "Ministry of Health",
            "company_fit_score": 82,
            "ai_confidence": 0.87,
            "budget": "$1.2M",
            "risks": [{"risk": "Legacy data quality", "level": "high"}],
            "why_fits": ["Prior NHS work", "Certified team"],
            "deliverables": ["Migration plan", "Data warehouse"],
            "constraints": {"hosting": "in-country", "clearance": True},
            "eligibility_items": [{"item": "ISO 27001", "met": True}],
        }
        created = client.post("/tenders", json=payload, headers=auth()).json()
        loaded = client.get(f"/tenders/{created['id']}", headers=auth()).json()
        for field, value in payload.items():
            assert loaded[field] == value, field

        changes = {
            "risks": [],
            "ai_confidence": 0.5,
            "company_fit_score": 0,
            "constraints": {"hosting": "any"},
        }
        client.patch(f"/tenders/{created['id']}", json=changes, headers=auth())
        reloaded = client.get(f"/tenders/{created['id']}", headers=auth()).json()
        for field, value in changes.items():
            assert reloaded[field] == value, field
        assert reloaded["why_fits"] == payload["why_fits"]

    def test_annotation_bounds(self, client, sample_tender):
        response = client.post(
            "/tenders", json={"title": "T", "client_name": "C", "ai_confidence": 1.5}, headers=auth()
        )
        assert response.status_code == 422
        response = client.patch(f"/tenders/{sample_tender['id']}", json={"company_fit_score": 101}, headers=auth())
        assert response.status_code == 422

    def test_list_filters_by_status(self, client, sample_tender):
        client.post("/tenders", json={"title": "Closed one", "client_name": "C", "status": "closed"}, headers=auth())

        all_tenders = client.get("/tenders", headers=auth()).json()
        assert len(all_tenders) == 2

        closed = client.get("/tenders", params={"status": "closed"}, headers=auth()).json()
        assert [t["title"] for t in closed] == ["Closed one"]

        assert client.get("/tenders", params={"status": "bogus"}, headers=auth()).status_code == 400

    def test_unknown_tender_is_404(self, client):
        response = client.get("/tenders/does-not-exist", headers=auth())
        assert response.status_code == 404
        assert response.json() == {"error": "Tender does-not-exist not found"}

    def test_outsider_cannot_read(self, client, sample_tender):
        response = client.get(f"/tenders/{sample_tender['id']}", headers=auth(OUTSIDER))
        assert response.status_code == 403
        assert client.get("/tenders", headers=auth(OUTSIDER)).json() == []

    def test_delete_removes_collaborators_and_draft(self, client, sample_tender, db_session):
        from tenderdesk.storage.tables import TenderCollaborator, TenderDraft

        tender_id = sample_tender["id"]
        client.post(f"/tenders/{tender_id}/collaborators", json={"user_id": TEAMMATE}, headers=auth())
        client.put(f"/tenders/{tender_id}/draft", json={"content": "<p>hi</p>"}, headers=auth())

        assert client.delete(f"/tenders/{tender_id}", headers=auth()).status_code == 204
        assert client.get(f"/tenders/{tender_id}", headers=auth()).status_code == 404
        assert db_session.query(TenderCollaborator).count() == 0
        assert db_session.query(TenderDraft).count() == 0


class TestSharing:
    def test_share_gives_collaborator_access(self, client, sample_tender):
        tender_id = sample_tender["id"]
        response = client.post(f"/tenders/{tender_id}/collaborators", json={"user_id": TEAMMATE}, headers=auth())
        assert response.status_code == 201
        assert response.json()["role"] == "editor"
        assert response.json()["invited_by"] == OWNER

        shared = client.get("/tenders", headers=auth(TEAMMATE)).json()
        assert [t["id"] for t in shared] == [tender_id]

        response = client.patch(f"/tenders/{tender_id}", json={"status": "running"}, headers=auth(TEAMMATE))
        assert response.status_code == 200

    def test_duplicate_share_is_409(self, client, sample_tender):
        url = f"/tenders/{sample_tender['id']}/collaborators"
        client.post(url, json={"user_id": TEAMMATE}, headers=auth())
        response = client.post(url, json={"user_id": TEAMMATE}, headers=auth())
        assert response.status_code == 409
        assert response.json() == {"error": "This user is already a collaborator"}

    def test_owner_cannot_share_with_self(self, client, sample_tender):
        response = client.post(
            f"/tenders/{sample_tender['id']}/collaborators", json={"user_id": OWNER}, headers=auth()
        )
        assert response.status_code == 400

    def test_only_owner_can_share_or_delete(self, client, sample_tender):
        tender_id = sample_tender["id"]
        client.post(f"/tenders/{tender_id}/collaborators", json={"user_id": TEAMMATE}, headers=auth())

        response = client.post(
            f"/tenders/{tender_id}/collaborators", json={"user_id": OUTSIDER}, headers=auth(TEAMMATE)
        )
        assert response.status_code == 403
        assert client.delete(f"/tenders/{tender_id}", headers=auth(TEAMMATE)).status_code == 403

    def test_remove_collaborator(self, client, sample_tender):
        tender_id = sample_tender["id"]
        added = client.post(
            f"/tenders/{tender_id}/collaborators", json={"user_id": TEAMMATE}, headers=auth()
        ).json()

        listed = client.get(f"/tenders/{tender_id}/collaborators", headers=auth()).json()
        assert [c["user_id"] for c in listed] == [TEAMMATE]

        response = client.delete(f"/tenders/{tender_id}/collaborators/{added['id']}", headers=auth())
        assert response.status_code == 204
        assert client.get(f"/tenders/{tender_id}", headers=auth(TEAMMATE)).status_code == 403


class TestDashboardAndSeed:
    def test_seed_then_dashboard(self, client):
        response = client.post("/seed-sample-tenders", headers=auth())
        assert response.status_code == 200
        assert len(response.json()["tenders"]) == 4

        dashboard = client.get("/dashboard", headers=auth()).json()
        counts = dashboard["counts"]
        assert counts["total"] == 4
        assert counts["open"] + counts["running"] + counts["closed"] == 4
        assert len(dashboard["open"]) == counts["open"]

    def test_dashboard_is_per_user(self, client, sample_tender):
        assert client.get("/dashboard", headers=auth(OUTSIDER)).json()["counts"]["total"] == 0


class TestDrafts:
    def test_missing_draft_is_404(self, client, sample_tender):
        response = client.get(f"/tenders/{sample_tender['id']}/draft", headers=auth())
        assert response.status_code == 404

    def test_save_and_load_draft(self, client, sample_tender):
        url = f"/tenders/{sample_tender['id']}/draft"
        client.put(url, json={"content": "<h1>Proposal</h1>"}, headers=auth())
        response = client.put(url, json={"content": "<h1>Proposal v2</h1>"}, headers=auth())
        assert response.status_code == 200

        draft = client.get(url, headers=auth()).json()
        assert draft["content"] == "<h1>Proposal v2</h1>"
        assert draft["updated_by"] == OWNER

    def test_export_docx(self, client, sample_tender):
        tender_id = sample_tender["id"]
        client.put(
            f"/tenders/{tender_id}/draft",
            json={"content": "<h1>Approach</h1><p>We will <strong>deliver</strong>.</p><ul><li>One</li></ul>"},
            headers=auth(),
        )
        response = client.get(f"/tenders/{tender_id}/draft/export", headers=auth())
        assert response.status_code == 200
        assert response.content[:2] == b"PK"
        assert 'filename="municipal-website-redesign.docx"' in response.headers["content-disposition"]

    def test_export_html_and_bad_format(self, client, sample_tender):
        tender_id = sample_tender["id"]
        client.put(f"/tenders/{tender_id}/draft", json={"content": "plain line"}, headers=auth())

        response = client.get(f"/tenders/{tender_id}/draft/export", params={"format": "html"}, headers=auth())
        assert response.status_code == 200
        assert "<p>plain line</p>" in response.text
        assert "<title>Municipal Website Redesign</title>" in response.text

        response = client.get(f"/tenders/{tender_id}/draft/export", params={"format": "pdf"}, headers=auth())
        assert response.status_code == 400
