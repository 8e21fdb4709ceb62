"""Onboarding, signature requests, documents and retirees."""

import pytest


@pytest.fixture
def form(client, auth_headers, employee):
    resp = client.post(
        "/api/onboarding/forms",
        json={"employee_id": employee["id"], "form_type": "W-4", "form_data": {"allowances": 2}},
        headers=auth_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestOnboardingForms:
    """Forms go draft -> submitted -> approved/rejected, one step at a time."""

    def test_submit_then_approve(self, client, auth_headers, form):
        url = f"/api/onboarding/forms/{form['id']}"
        assert form["status"] == "draft"

        submitted = client.post(f"{url}/submit", headers=auth_headers).json()
        assert submitted["status"] == "submitted"
        assert submitted["submitted_at"] is not None

        reviewed = client.post(f"{url}/review", json={"approve": True, "notes": "Complete"}, headers=auth_headers).json()
        assert reviewed["status"] == "approved"
        assert reviewed["review_notes"] == "Complete"
        assert reviewed["reviewed_at"] is not None

    def test_submit_only_from_draft(self, client, auth_headers, form):
        url = f"/api/onboarding/forms/{form['id']}"
        assert client.post(f"{url}/submit", headers=auth_headers).status_code == 200
        assert client.post(f"{url}/submit", headers=auth_headers).status_code == 409

    def test_review_only_when_submitted(self, client, auth_headers, form):
        url = f"/api/onboarding/forms/{form['id']}"
        assert client.post(f"{url}/review", json={"approve": True}, headers=auth_headers).status_code == 409

        client.post(f"{url}/submit", headers=auth_headers)
        resp = client.post(f"{url}/review", json={"approve": False, "notes": "Unsigned"}, headers=auth_headers)
        assert resp.json()["status"] == "rejected"
        assert client.post(f"{url}/review", json={"approve": True}, headers=auth_headers).status_code == 409

    def test_review_requires_hr(self, client, auth_headers, employee_headers, form):
        url = f"/api/onboarding/forms/{form['id']}"
        client.post(f"{url}/submit", headers=auth_headers)
        assert client.post(f"{url}/review", json={"approve": True}, headers=employee_headers).status_code == 403


class TestOnboardingWorkflows:
    def test_completed_at_stamped_once(self, client, auth_headers, employee):
        resp = client.post("/api/onboarding", json={"employee_id": employee["id"]}, headers=auth_headers)
        assert resp.status_code == 201
        workflow = resp.json()
        assert workflow["status"] == "started"
        assert workflow["required_documents"] == []
        url = f"/api/onboarding/{workflow['id']}"

        first = client.put(url, json={"status": "completed"}, headers=auth_headers).json()
        assert first["completed_at"] is not None

        second = client.put(url, json={"status": "completed", "notes": "Badge issued"}, headers=auth_headers).json()
        assert second["completed_at"] == first["completed_at"]
        assert second["notes"] == "Badge issued"

    def test_unknown_employee(self, client, auth_headers):
        assert client.post("/api/onboarding", json={"employee_id": 404}, headers=auth_headers).status_code == 404


def create_signature_request(client, headers, employee_id, **extra):
    payload = {"employee_id": employee_id, "document_type": "letter", "document_id": 1, "title": "Contract renewal"}
    payload.update(extra)
    resp = client.post("/api/signature-requests", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestSignatureRequests:
    """Only pending requests can be signed, declined or reminded."""

    def test_reminders_counted(self, client, auth_headers, employee):
        request = create_signature_request(client, auth_headers, employee["id"])
        url = f"/api/signature-requests/{request['id']}/reminder"

        first = client.post(url, headers=auth_headers).json()
        assert first["reminder_count"] == 1
        assert first["last_reminder_at"] is not None
        assert client.post(url, headers=auth_headers).json()["reminder_count"] == 2

    def test_signed_request_is_closed(self, client, auth_headers, employee):
        request = create_signature_request(client, auth_headers, employee["id"])
        url = f"/api/signature-requests/{request['id']}"
        sign = {"signature_data": "data:image/png;base64,AAAA", "signed_by": "Jane Doe"}

        signed = client.post(f"{url}/sign", json=sign, headers=auth_headers).json()
        assert signed["status"] == "signed"
        assert signed["signed_by"] == "Jane Doe"

        assert client.post(f"{url}/sign", json=sign, headers=auth_headers).status_code == 409
        assert client.post(f"{url}/decline", headers=auth_headers).status_code == 409
        assert client.post(f"{url}/reminder", headers=auth_headers).status_code == 409

    def test_declined_request_is_closed(self, client, auth_headers, employee):
        request = create_signature_request(client, auth_headers, employee["id"])
        url = f"/api/signature-requests/{request['id']}"

        declined = client.post(f"{url}/decline", json={"notes": "Wrong salary"}, headers=auth_headers).json()
        assert declined["status"] == "declined"
        assert declined["notes"] == "Wrong salary"

        sign = {"signature_data": "x", "signed_by": "Jane Doe"}
        assert client.post(f"{url}/sign", json=sign, headers=auth_headers).status_code == 409
        assert client.get("/api/signature-requests/pending", headers=auth_headers).json() == []

    def test_listed_by_document(self, client, auth_headers, employee):
        request = create_signature_request(client, auth_headers, employee["id"], document_id=7)
        listed = client.get("/api/signature-requests/document/letter/7", headers=auth_headers).json()
        assert [r["id"] for r in listed] == [request["id"]]


class TestDocuments:
    def test_crud_and_pending_list(self, client, auth_headers, employee):
        resp = client.post(
            "/api/documents",
            json={"employee_id": employee["id"], "document_type": "certification", "file_name": "license.pdf"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        document = resp.json()
        assert document["status"] == "pending"
        url = f"/api/documents/{document['id']}"

        pending = client.get("/api/documents/pending", headers=auth_headers).json()
        assert [d["id"] for d in pending] == [document["id"]]

        updated = client.put(url, json={"status": "approved"}, headers=auth_headers).json()
        assert updated["status"] == "approved"
        assert client.get("/api/documents/pending", headers=auth_headers).json() == []

        by_employee = client.get(f"/api/documents/employee/{employee['id']}", headers=auth_headers).json()
        assert [d["id"] for d in by_employee] == [document["id"]]

        assert client.delete(url, headers=auth_headers).json() == {"message": "Document deleted successfully"}
        assert client.delete(url, headers=auth_headers).status_code == 404

    def test_unknown_employee(self, client, auth_headers):
        resp = client.post(
            "/api/documents",
            json={"employee_id": 404, "document_type": "id", "file_name": "id.png"},
            headers=auth_headers,
        )
        assert resp.status_code == 404


class TestRetirees:
    def test_crud(self, client, auth_headers):
        resp = client.post(
            "/api/retirees",
            json={"first_name": "Walt", "last_name": "Green", "retirement_date": "2023-06-30", "years_of_service": 31},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        retiree = resp.json()
        url = f"/api/retirees/{retiree['id']}"

        assert [r["id"] for r in client.get("/api/retirees", headers=auth_headers).json()] == [retiree["id"]]

        updated = client.put(url, json={"pension_plan": "State Teachers"}, headers=auth_headers).json()
        assert updated["pension_plan"] == "State Teachers"
        assert updated["years_of_service"] == 31

        assert client.put(url, json={"last_name": None}, headers=auth_headers).status_code == 400

        assert client.delete(url, headers=auth_headers).json() == {"message": "Retiree deleted successfully"}
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_requires_hr_to_write(self, client, employee_headers):
        resp = client.post(
            "/api/retirees",
            json={"first_name": "Walt", "last_name": "Green", "retirement_date": "2023-06-30"},
            headers=employee_headers,
        )
        assert resp.status_code == 403
