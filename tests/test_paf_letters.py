"""Personnel action forms and letter processing."""

from app.models.models import PafApprovalStep, PafSubmission, PafTimestamp


def paf_form(**overrides):
    form = {
        "employeeName": "Jane Doe",
        "positionTitle": "Math Teacher",
        "pafType": "new_hire",
        "effectiveDate": "2024-08-15",
        "justification": "Replacing retiring staff member",
        "fundingSource": "General Fund",
    }
    form.update(overrides)
    return form


class TestPafOnlineForm:
    def test_missing_justification_persists_nothing(self, client, auth_headers, db):
        form = paf_form()
        del form["justification"]
        resp = client.post("/api/paf/submit", json=form, headers=auth_headers)
        assert resp.status_code == 400
        assert "justification" in resp.json()["detail"]
        assert db.query(PafSubmission).count() == 0

    def test_blank_position_title_rejected(self, client, auth_headers):
        resp = client.post("/api/paf/submit", json=paf_form(positionTitle="  "), headers=auth_headers)
        assert resp.status_code == 400

    def test_valid_form_saved_as_draft(self, client, auth_headers, db):
        resp = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "PAF saved as draft"
        assert body["submission"]["status"] == "draft"
        assert body["submission"]["form_data"]["fundingSource"] == "General Fund"
        assert db.query(PafSubmission).count() == 1


class TestPafApprovals:
    def test_chain_approves_submission(self, client, auth_headers, db):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        url = f"/api/paf/submissions/{submission['id']}"

        resp = client.post(f"{url}/submit", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "submitted"
        assert db.query(PafApprovalStep).filter_by(submission_id=submission["id"]).count() == 3

        for step in (1, 2, 3):
            resp = client.post(
                f"{url}/approve",
                json={"step": step, "action": "approve", "signature": "J. Admin"},
                headers=auth_headers,
            )
            assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "approved"

        steps = client.get(f"{url}/approvals", headers=auth_headers).json()
        assert [s["status"] for s in steps] == ["approved", "approved", "approved"]

    def test_denial_and_draft_guard(self, client, auth_headers):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        url = f"/api/paf/submissions/{submission['id']}"

        resp = client.post(f"{url}/approve", json={"step": 1, "action": "approve"}, headers=auth_headers)
        assert resp.status_code == 409

        client.post(f"{url}/submit", headers=auth_headers)
        resp = client.post(f"{url}/approve", json={"step": 1, "action": "reject"}, headers=auth_headers)
        assert resp.json()["status"] == "denied"

    def test_pdf_download(self, client, auth_headers):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        resp = client.get(f"/api/paf/submissions/{submission['id']}/pdf", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")

    def test_workflow_templates_listed(self, client, auth_headers):
        names = [t["name"] for t in client.get("/api/paf/workflow-templates", headers=auth_headers).json()]
        assert names == ["Standard Approval", "Fast Track", "Full Review"]


class TestPafTimeline:
    """Every lifecycle change of a submission lands in its audit trail."""

    def test_events_follow_the_chain(self, client, auth_headers):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        url = f"/api/paf/submissions/{submission['id']}"
        client.post(f"{url}/submit", headers=auth_headers)
        for step in (1, 2, 3):
            client.post(f"{url}/approve", json={"step": step, "action": "approve", "comments": f"ok {step}"}, headers=auth_headers)

        resp = client.get(f"{url}/timeline", headers=auth_headers)
        assert resp.status_code == 200
        events = resp.json()
        assert [e["event_type"] for e in events] == ["created", "submitted", "reviewed", "reviewed", "approved"]
        assert [(e["from_status"], e["to_status"]) for e in events] == [
            (None, "draft"),
            ("draft", "submitted"),
            ("submitted", "under_review"),
            ("under_review", "under_review"),
            ("under_review", "approved"),
        ]
        assert events[-1]["details"] == {"step": 3, "approver_role": "superintendent", "comments": "ok 3"}
        assert events[0]["user_role"] == "admin"

    def test_denial_recorded(self, client, auth_headers):
        submission = client.post("/api/paf/submissions", json=paf_form(), headers=auth_headers).json()
        url = f"/api/paf/submissions/{submission['id']}"
        client.post(f"{url}/submit", headers=auth_headers)
        client.post(f"{url}/approve", json={"step": 1, "action": "reject"}, headers=auth_headers)

        events = client.get(f"{url}/timeline", headers=auth_headers).json()
        assert events[-1]["event_type"] == "rejected"
        assert events[-1]["to_status"] == "denied"

    def test_refused_transition_adds_nothing(self, client, auth_headers, db):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        url = f"/api/paf/submissions/{submission['id']}"
        assert client.post(f"{url}/approve", json={"step": 1, "action": "approve"}, headers=auth_headers).status_code == 409
        assert db.query(PafTimestamp).count() == 1

    def test_hidden_from_other_submitters(self, client, auth_headers, employee_headers):
        submission = client.post("/api/paf/submit", json=paf_form(), headers=auth_headers).json()["submission"]
        resp = client.get(f"/api/paf/submissions/{submission['id']}/timeline", headers=employee_headers)
        assert resp.status_code == 404

    def test_unknown_employee_rejected(self, client, auth_headers, db):
        resp = client.post("/api/paf/submit", json=paf_form(employeeId=4242), headers=auth_headers)
        assert resp.status_code == 400
        assert db.query(PafSubmission).count() == 0


class TestLetters:
    """Letters are drafted, processed against an employee, then sent."""

    def create_letter(self, client, headers, employee_id=None):
        resp = client.post(
            "/api/letters",
            json={
                "title": "Offer letter",
                "letter_type": "offer",
                "employee_id": employee_id,
                "template_content": "Dear {{firstName}} {{lastName}}, your salary is {{salary}} from {{startDate}}.",
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    def test_process_substitutes_placeholders(self, client, auth_headers, employee):
        letter = self.create_letter(client, auth_headers, employee["id"])
        resp = client.post(f"/api/letters/{letter['id']}/process", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "processed"
        assert body["processed_content"] == "Dear Jane Doe, your salary is $55,000.00 from 08/15/2022."
        assert set(body["placeholders"]) == {"firstName", "lastName", "salary", "startDate"}

    def test_send_only_after_processing(self, client, auth_headers, employee):
        letter = self.create_letter(client, auth_headers, employee["id"])
        url = f"/api/letters/{letter['id']}"
        assert client.post(f"{url}/send", headers=auth_headers).status_code == 409

        client.post(f"{url}/process", headers=auth_headers)
        resp = client.post(f"{url}/send", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "sent"
        assert client.post(f"{url}/send", headers=auth_headers).status_code == 409

    def test_process_without_employee_fails(self, client, auth_headers):
        letter = self.create_letter(client, auth_headers)
        assert client.post(f"/api/letters/{letter['id']}/process", headers=auth_headers).status_code == 400

    def test_pdf_renders(self, client, auth_headers, employee):
        letter = self.create_letter(client, auth_headers, employee["id"])
        resp = client.get(f"/api/letters/{letter['id']}/pdf", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")
