"""Time card approval chain, extra pay requests and workflow templates."""

import pytest

from app.models.models import ExtraPayTimestamp
from app.storage import DEFAULT_TIME_CARD_NOTE


@pytest.fixture
def card_id(client, auth_headers, employee):
    cards = client.get(f"/api/time-cards/employee/{employee['id']}", headers=auth_headers).json()
    return cards[0]["id"]


def stage(client, headers, card_id, action, notes=None, prefix="/api/time-cards"):
    body = {"notes": notes} if notes is not None else None
    return client.post(f"{prefix}/{card_id}/{action}", json=body, headers=headers)


class TestTimeCardApprovalChain:
    """Cards advance one stage per endpoint and never skip ahead."""

    def test_full_chain_reaches_completed(self, client, auth_headers, card_id):
        resp = stage(client, auth_headers, card_id, "submit", notes="Week 1")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "secretary_submitted"
        assert body["current_approval_stage"] == "employee"
        assert body["secretary_notes"] == "Week 1"
        assert body["submitted_at"] is not None

        body = stage(client, auth_headers, card_id, "approve-employee").json()
        assert body["status"] == "employee_approved"
        assert body["current_approval_stage"] == "administrator"

        body = stage(client, auth_headers, card_id, "approve-admin").json()
        assert body["status"] == "admin_approved"
        assert body["current_approval_stage"] == "payroll"

        body = stage(client, auth_headers, card_id, "process-payroll").json()
        assert body["status"] == "payroll_processed"
        assert body["current_approval_stage"] == "completed"

    def test_skipping_a_stage_conflicts(self, client, auth_headers, card_id):
        resp = stage(client, auth_headers, card_id, "approve-admin")
        assert resp.status_code == 409

        card = client.get(f"/api/time-cards/{card_id}", headers=auth_headers).json()
        assert card["status"] == "draft"

    def test_reject_requires_notes(self, client, auth_headers, card_id):
        stage(client, auth_headers, card_id, "submit")
        assert stage(client, auth_headers, card_id, "reject").status_code == 400
        assert stage(client, auth_headers, card_id, "reject", notes="   ").status_code == 400

        resp = stage(client, auth_headers, card_id, "reject", notes="Missing Friday hours")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "rejected"
        assert body["current_approval_stage"] == "employee"
        assert body["employee_notes"] == "Missing Friday hours"
        assert body["notes"] == DEFAULT_TIME_CARD_NOTE

    def test_rejected_card_can_be_resubmitted(self, client, auth_headers, card_id):
        stage(client, auth_headers, card_id, "submit")
        stage(client, auth_headers, card_id, "reject", notes="Fix hours")
        resp = stage(client, auth_headers, card_id, "submit")
        assert resp.status_code == 200
        assert resp.json()["status"] == "secretary_submitted"

    def test_approval_stage_listing(self, client, auth_headers, card_id):
        stage(client, auth_headers, card_id, "submit")
        cards = client.get("/api/time-cards/approval-stage/employee", headers=auth_headers).json()
        assert [c["id"] for c in cards] == [card_id]
        assert client.get("/api/time-cards/approval-stage/payroll", headers=auth_headers).json() == []


class TestTimeCardHours:
    def test_create_computes_hours_and_overtime(self, client, auth_headers, employee):
        resp = client.post(
            "/api/time-cards",
            json={
                "employee_id": employee["id"],
                "date": "2024-02-05T00:00:00",
                "clock_in": "2024-02-05T07:00:00",
                "clock_out": "2024-02-05T17:30:00",
                "break_start": "2024-02-05T12:00:00",
                "break_end": "2024-02-05T12:30:00",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["total_hours"] == 10.0
        assert body["overtime_hours"] == 2.0

    def test_update_one_clock_field_after_utc_create(self, client, auth_headers, employee):
        card = client.post(
            "/api/time-cards",
            json={
                "employee_id": employee["id"],
                "date": "2026-01-05T00:00:00Z",
                "clock_in": "2026-01-05T08:00:00Z",
                "clock_out": "2026-01-05T12:00:00Z",
            },
            headers=auth_headers,
        ).json()
        assert card["total_hours"] == 4.0

        resp = client.put(
            f"/api/time-cards/{card['id']}",
            json={"clock_out": "2026-01-05T16:00:00Z"},
            headers=auth_headers,
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["total_hours"] == 8.0

    def test_create_with_mixed_offsets(self, client, auth_headers, employee):
        resp = client.post(
            "/api/time-cards",
            json={
                "employee_id": employee["id"],
                "date": "2026-01-05T00:00:00",
                "clock_in": "2026-01-05T08:00:00",
                "clock_out": "2026-01-05T17:00:00+00:00",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["total_hours"] == 9.0

    def test_date_range_rejects_reversed_bounds(self, client, auth_headers):
        resp = client.get(
            "/api/time-cards/date-range",
            params={"start_date": "2024-02-10", "end_date": "2024-02-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 400


class TestSubstituteTimeCards:
    def test_pay_and_chain_without_employee_step(self, client, auth_headers, employee_payload):
        substitute = client.post(
            "/api/employees",
            json={**employee_payload, "employee_id": "S-2001", "email": "sub@district.org", "employee_type": "substitute"},
            headers=auth_headers,
        ).json()
        resp = client.post(
            "/api/substitute-time-cards",
            json={
                "substitute_id": substitute["id"],
                "date": "2024-02-05T00:00:00",
                "clock_in": "2024-02-05T08:00:00",
                "clock_out": "2024-02-05T11:00:00",
                "daily_rate": 150,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        card = resp.json()
        assert card["total_hours"] == 3.0
        assert card["total_pay"] == 75.0

        prefix = "/api/substitute-time-cards"
        body = stage(client, auth_headers, card["id"], "submit", prefix=prefix).json()
        assert body["current_approval_stage"] == "administrator"
        body = stage(client, auth_headers, card["id"], "approve-admin", prefix=prefix).json()
        assert body["status"] == "admin_approved"
        body = stage(client, auth_headers, card["id"], "process-payroll", prefix=prefix).json()
        assert body["current_approval_stage"] == "completed"


def create_request(client, headers, employee_id, **extra):
    payload = {"employee_id": employee_id, "amount": 250, "description": "Saturday detention coverage"}
    payload.update(extra)
    resp = client.post("/api/extra-pay/requests", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestExtraPayRequests:
    """Requests move pending -> approved -> paid, stamping each time once."""

    def test_approve_then_pay(self, client, auth_headers, employee, db):
        request = create_request(client, auth_headers, employee["id"])
        assert request["status"] == "pending"

        approved = client.patch(
            f"/api/extra-pay/requests/{request['id']}/approve",
            json={"comments": "ok"},
            headers=auth_headers,
        ).json()
        assert approved["status"] == "approved"
        assert approved["approved_at"] is not None

        paid = client.patch(f"/api/extra-pay/requests/{request['id']}/mark-paid", headers=auth_headers).json()
        assert paid["status"] == "paid"
        assert paid["paid_at"] is not None
        assert paid["approved_at"] == approved["approved_at"]

        events = [e.event_type for e in db.query(ExtraPayTimestamp).order_by(ExtraPayTimestamp.id)]
        assert events == ["created", "approved", "paid"]

    def test_out_of_order_transitions_conflict(self, client, auth_headers, employee):
        request = create_request(client, auth_headers, employee["id"])
        url = f"/api/extra-pay/requests/{request['id']}"

        assert client.patch(f"{url}/mark-paid", headers=auth_headers).status_code == 409
        assert client.patch(f"{url}/approve", headers=auth_headers).status_code == 200
        assert client.patch(f"{url}/approve", headers=auth_headers).status_code == 409
        assert client.patch(f"{url}/reject", json={"reason": "late"}, headers=auth_headers).status_code == 409

    def test_reject_requires_reason(self, client, auth_headers, employee):
        request = create_request(client, auth_headers, employee["id"])
        url = f"/api/extra-pay/requests/{request['id']}/reject"

        assert client.patch(url, json={}, headers=auth_headers).status_code == 400
        resp = client.patch(url, json={"reason": "Not pre-approved"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["rejection_reason"] == "Not pre-approved"

    def test_inactive_contract_refuses_requests(self, client, auth_headers, employee):
        contract = client.post(
            "/api/extra-pay/contracts",
            json={
                "title": "Yearbook advisor",
                "amount": 1500,
                "start_date": "2024-01-01",
                "end_date": "2024-06-30",
                "status": "inactive",
            },
            headers=auth_headers,
        ).json()
        resp = client.post(
            "/api/extra-pay/requests",
            json={"employee_id": employee["id"], "contract_id": contract["id"], "amount": 100, "description": "Layout"},
            headers=auth_headers,
        )
        assert resp.status_code == 409

    def test_detail_includes_names_and_timeline(self, client, auth_headers, employee):
        request = create_request(client, auth_headers, employee["id"])
        detail = client.get(f"/api/extra-pay/requests/{request['id']}", headers=auth_headers).json()
        assert detail["employee_name"] == "Jane Doe"
        assert [e["event_type"] for e in detail["timeline"]] == ["created"]


class TestContracts:
    def test_status_change_lands_on_timeline(self, client, auth_headers):
        contract = client.post(
            "/api/extra-pay/contracts",
            json={"title": "Robotics club", "amount": 900, "start_date": "2024-01-01", "end_date": "2024-06-30"},
            headers=auth_headers,
        ).json()
        url = f"/api/extra-pay/contracts/{contract['id']}"

        resp = client.put(url, json={"status": "inactive"}, headers=auth_headers)
        assert resp.status_code == 200
        client.put(url, json={"amount": 950}, headers=auth_headers)

        events = client.get(url, headers=auth_headers).json()["timeline"]
        assert [e["event_type"] for e in events] == ["created", "status_change"]
        assert (events[1]["from_status"], events[1]["to_status"]) == ("active", "inactive")

    def test_reversed_dates_rejected(self, client, auth_headers):
        contract = client.post(
            "/api/extra-pay/contracts",
            json={"title": "Drama", "amount": 400, "start_date": "2024-01-01", "end_date": "2024-06-30"},
            headers=auth_headers,
        ).json()
        resp = client.put(
            f"/api/extra-pay/contracts/{contract['id']}", json={"end_date": "2023-12-01"}, headers=auth_headers
        )
        assert resp.status_code == 400


class TestWorkflowTemplates:
    def test_steps_sorted_and_delete_is_final(self, client, auth_headers):
        resp = client.post(
            "/api/extra-pay/workflow-templates",
            json={
                "name": "Coaching stipend",
                "steps": [
                    {"role": "payroll", "title": "Payroll", "order": 2},
                    {"role": "hr", "title": "HR", "order": 1},
                ],
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201
        template = resp.json()
        assert [s["order"] for s in template["steps"]] == [1, 2]

        url = f"/api/extra-pay/workflow-templates/{template['id']}"
        resp = client.delete(url, headers=auth_headers)
        assert resp.status_code == 204
        assert resp.content == b""

        assert client.get("/api/extra-pay/workflow-templates", headers=auth_headers).json() == []
        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.delete(url, headers=auth_headers).status_code == 404
