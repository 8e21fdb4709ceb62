"""Employee, leave, payroll and account endpoint tests."""

from app.models.models import (
    ActivityLog,
    ExtraPayTimestamp,
    LeaveRequest,
    Letter,
    PafSubmission,
    SubstituteAssignment,
    TimeCard,
)
from app.storage import DEFAULT_TIME_CARD_NOTE


class TestEmployeeCreation:
    """Creating an employee also opens their first time card."""

    def test_creates_exactly_one_default_time_card(self, client, auth_headers, employee, db):
        resp = client.get(f"/api/time-cards/employee/{employee['id']}", headers=auth_headers)
        assert resp.status_code == 200
        cards = resp.json()
        assert len(cards) == 1

        card = cards[0]
        assert card["status"] == "draft"
        assert card["current_approval_stage"] == "secretary"
        assert card["total_hours"] == 0
        assert card["notes"] == DEFAULT_TIME_CARD_NOTE
        assert db.query(TimeCard).count() == 1

    def test_writes_activity_logs(self, employee, db):
        actions = [a.action for a in db.query(ActivityLog).order_by(ActivityLog.id).all()]
        assert actions == ["employee_created", "time_card_created"]

    def test_duplicate_employee_id_conflicts(self, client, auth_headers, employee, employee_payload):
        payload = {**employee_payload, "email": "other@district.org"}
        resp = client.post("/api/employees", json=payload, headers=auth_headers)
        assert resp.status_code == 409

    def test_requires_hr_role(self, client, employee_headers, employee_payload):
        resp = client.post("/api/employees", json=employee_payload, headers=employee_headers)
        assert resp.status_code == 403

    def test_requires_authentication(self, client, employee_payload):
        assert client.get("/api/employees").status_code == 401


class TestEmployeeCrud:
    def test_search_and_update(self, client, auth_headers, employee):
        resp = client.get("/api/employees", params={"search": "doe"}, headers=auth_headers)
        assert [e["id"] for e in resp.json()] == [employee["id"]]

        resp = client.put(
            f"/api/employees/{employee['id']}",
            json={"position": "Department Chair"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["position"] == "Department Chair"

    def test_delete_removes_dependents(self, client, auth_headers, employee, db):
        resp = client.delete(f"/api/employees/{employee['id']}", headers=auth_headers)
        assert resp.status_code == 204
        assert client.get(f"/api/employees/{employee['id']}", headers=auth_headers).status_code == 404
        assert db.query(TimeCard).count() == 0

    def test_delete_keeps_letters_and_pafs_unlinked(self, client, auth_headers, employee, db):
        letter = client.post(
            "/api/letters",
            json={
                "title": "Offer letter",
                "template_content": "Dear {{firstName}}",
                "letter_type": "offer",
                "employee_id": employee["id"],
            },
            headers=auth_headers,
        )
        assert letter.status_code == 201, letter.text
        paf = client.post(
            "/api/paf/submissions",
            json={
                "employeeId": employee["id"],
                "positionTitle": "Math Teacher",
                "pafType": "change_existing",
                "justification": "Schedule change",
            },
            headers=auth_headers,
        )
        assert paf.status_code == 201, paf.text

        resp = client.delete(f"/api/employees/{employee['id']}", headers=auth_headers)
        assert resp.status_code == 204
        assert db.query(Letter).one().employee_id is None
        assert db.query(PafSubmission).one().employee_id is None

    def test_delete_with_substitute_coverage(self, client, auth_headers, employee, employee_payload, db):
        substitute = client.post(
            "/api/employees",
            json={**employee_payload, "employee_id": "S-3001", "email": "cover@district.org", "employee_type": "substitute"},
            headers=auth_headers,
        ).json()
        leave_type = client.post("/api/leave-types", json={"name": "Sick Leave"}, headers=auth_headers).json()
        leave = client.post(
            "/api/leave-requests",
            json={
                "employee_id": employee["id"],
                "leave_type_id": leave_type["id"],
                "start_date": "2024-03-11",
                "end_date": "2024-03-12",
            },
            headers=auth_headers,
        ).json()
        resp = client.post(
            "/api/substitutes/assignments",
            json={"leave_request_id": leave["id"], "substitute_employee_id": substitute["id"], "assigned_date": "2024-03-11"},
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text

        # Removing the substitute clears the coverage but keeps the leave
        assert client.delete(f"/api/employees/{substitute['id']}", headers=auth_headers).status_code == 204
        assert db.query(SubstituteAssignment).count() == 0
        assert db.query(LeaveRequest).one().substitute_assigned is None

        assert client.delete(f"/api/employees/{employee['id']}", headers=auth_headers).status_code == 204
        assert db.query(LeaveRequest).count() == 0

    def test_delete_after_extra_pay_request(self, client, auth_headers, employee, db):
        resp = client.post(
            "/api/extra-pay/requests",
            json={"employee_id": employee["id"], "amount": 80, "description": "Bus duty"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        assert client.delete(f"/api/employees/{employee['id']}", headers=auth_headers).status_code == 204
        assert db.query(ExtraPayTimestamp).filter(ExtraPayTimestamp.entity_type == "request").count() == 0

    def test_null_for_required_field_is_rejected(self, client, auth_headers, employee):
        url = f"/api/employees/{employee['id']}"
        resp = client.put(url, json={"first_name": None}, headers=auth_headers)
        assert resp.status_code == 400
        assert "first_name" in resp.json()["detail"]
        assert client.get(url, headers=auth_headers).json()["first_name"] == "Jane"

    def test_null_clears_optional_field(self, client, auth_headers, employee):
        url = f"/api/employees/{employee['id']}"
        client.put(url, json={"phone": "555-0100"}, headers=auth_headers)
        resp = client.put(url, json={"phone": None}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["phone"] is None

    def test_unknown_supervisor_rejected(self, client, auth_headers, employee):
        url = f"/api/employees/{employee['id']}"
        assert client.put(url, json={"supervisor_id": 999}, headers=auth_headers).status_code == 400
        assert client.put(url, json={"supervisor_id": employee["id"]}, headers=auth_headers).status_code == 400

    def test_unknown_employee_is_404(self, client, auth_headers):
        assert client.get("/api/employees/999", headers=auth_headers).status_code == 404


class TestLeave:
    def test_end_before_start_rejected(self, client, auth_headers, employee):
        leave_type = client.post("/api/leave-types", json={"name": "Sick Leave"}, headers=auth_headers).json()
        resp = client.post(
            "/api/leave-requests",
            json={
                "employee_id": employee["id"],
                "leave_type_id": leave_type["id"],
                "start_date": "2024-03-10",
                "end_date": "2024-03-08",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_approval_stamps_approver(self, client, auth_headers, employee, admin_user):
        leave_type = client.post("/api/leave-types", json={"name": "Personal Leave"}, headers=auth_headers).json()
        request = client.post(
            "/api/leave-requests",
            json={
                "employee_id": employee["id"],
                "leave_type_id": leave_type["id"],
                "start_date": "2024-03-10",
                "end_date": "2024-03-11",
            },
            headers=auth_headers,
        ).json()
        assert request["status"] == "pending"
        assert len(client.get("/api/leave-requests/pending", headers=auth_headers).json()) == 1

        resp = client.put(f"/api/leave-requests/{request['id']}", json={"status": "approved"}, headers=auth_headers)
        body = resp.json()
        assert body["status"] == "approved"
        assert body["approved_by"] == str(admin_user.id)
        assert body["approved_at"] is not None


class TestSubstituteAssignments:
    def test_assignment_marks_leave_covered(self, client, auth_headers, employee, employee_payload):
        substitute = client.post(
            "/api/employees",
            json={**employee_payload, "employee_id": "S-4001", "email": "floater@district.org", "employee_type": "substitute"},
            headers=auth_headers,
        ).json()
        leave_type = client.post("/api/leave-types", json={"name": "Jury Duty"}, headers=auth_headers).json()
        leave = client.post(
            "/api/leave-requests",
            json={
                "employee_id": employee["id"],
                "leave_type_id": leave_type["id"],
                "start_date": "2024-04-01",
                "end_date": "2024-04-01",
                "substitute_required": True,
            },
            headers=auth_headers,
        ).json()
        body = {"leave_request_id": leave["id"], "substitute_employee_id": substitute["id"], "assigned_date": "2024-04-01"}

        resp = client.post("/api/substitutes/assignments", json=body, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["status"] == "assigned"

        requests = client.get(f"/api/leave-requests/employee/{employee['id']}", headers=auth_headers).json()
        assert requests[0]["substitute_assigned"] == substitute["id"]

        listed = client.get("/api/substitutes/assignments", params={"date": "2024-04-01"}, headers=auth_headers).json()
        assert [a["id"] for a in listed] == [resp.json()["id"]]

    def test_only_substitutes_can_cover(self, client, auth_headers, employee):
        leave_type = client.post("/api/leave-types", json={"name": "Jury Duty"}, headers=auth_headers).json()
        leave = client.post(
            "/api/leave-requests",
            json={"employee_id": employee["id"], "leave_type_id": leave_type["id"], "start_date": "2024-04-01", "end_date": "2024-04-01"},
            headers=auth_headers,
        ).json()
        resp = client.post(
            "/api/substitutes/assignments",
            json={"leave_request_id": leave["id"], "substitute_employee_id": employee["id"], "assigned_date": "2024-04-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 400


class TestPayroll:
    def test_net_pay_defaults_and_process_once(self, client, auth_headers, employee):
        resp = client.post(
            "/api/payroll",
            json={
                "employee_id": employee["id"],
                "pay_period_start": "2024-01-01",
                "pay_period_end": "2024-01-15",
                "gross_pay": 2500,
                "deductions": 400.5,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201
        record = resp.json()
        assert record["net_pay"] == 2099.5

        assert client.post(f"/api/payroll/{record['id']}/process", headers=auth_headers).status_code == 200
        assert client.post(f"/api/payroll/{record['id']}/process", headers=auth_headers).status_code == 409

        summary = client.get("/api/payroll/summary", headers=auth_headers).json()
        assert summary["record_count"] == 1
        assert summary["processed_count"] == 1
        assert summary["unprocessed_count"] == 0


class TestEmployeeAccounts:
    def test_create_grant_and_conflicts(self, client, auth_headers, employee):
        resp = client.post(
            "/api/employee-accounts",
            json={"employee_id": employee["id"], "password": "initialpass"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        account = resp.json()
        assert account["username"] == "doej"
        assert account["login_enabled"] is False
        assert "password_hash" not in account

        again = client.post(
            "/api/employee-accounts",
            json={"employee_id": employee["id"], "password": "initialpass"},
            headers=auth_headers,
        )
        assert again.status_code == 409

        granted = client.post(
            f"/api/employee-accounts/{account['id']}/grant-access",
            json={"notes": "start of term"},
            headers=auth_headers,
        ).json()
        assert granted["login_enabled"] is True
        assert granted["access_granted_at"] is not None

        revoked = client.post(
            f"/api/employee-accounts/{account['id']}/revoke-access",
            json={},
            headers=auth_headers,
        ).json()
        assert revoked["login_enabled"] is False


class TestDashboard:
    def test_stats_count_active_teachers(self, client, auth_headers, employee):
        stats = client.get("/api/dashboard/stats", headers=auth_headers).json()
        assert stats["total_employees"] == 1
        assert stats["teachers"] == 1
        assert stats["substitutes"] == 0

        activity = client.get("/api/dashboard/recent-activity", params={"limit": 1}, headers=auth_headers).json()
        assert len(activity) == 1
