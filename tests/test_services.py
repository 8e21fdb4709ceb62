"""Pure helpers: hours, pay, stage rules and letter rendering."""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.models import Employee
from app.services.letters import employee_values, render_template
from app.services.time_cards import (
    TIME_CARD_RULES,
    as_utc,
    compute_overtime,
    compute_total_hours,
    stage_update,
    substitute_pay,
)


class TestComputeTotalHours:
    def test_subtracts_break(self):
        hours = compute_total_hours(
            datetime(2024, 1, 8, 8, 0),
            datetime(2024, 1, 8, 16, 30),
            datetime(2024, 1, 8, 12, 0),
            datetime(2024, 1, 8, 12, 45),
        )
        assert hours == 7.75

    @pytest.mark.parametrize(
        "clock_in, clock_out",
        [
            (None, datetime(2024, 1, 8, 16)),
            (datetime(2024, 1, 8, 8), None),
            (datetime(2024, 1, 8, 16), datetime(2024, 1, 8, 8)),
        ],
    )
    def test_incomplete_or_reversed_is_none(self, clock_in, clock_out):
        assert compute_total_hours(clock_in, clock_out) is None

    def test_mixed_naive_and_aware_times(self):
        hours = compute_total_hours(
            datetime(2024, 1, 8, 8, 0),
            datetime(2024, 1, 8, 16, 0, tzinfo=timezone.utc),
        )
        assert hours == 8.0

    def test_as_utc_converts_offsets(self):
        eastern = timezone(timedelta(hours=-5))
        assert as_utc(datetime(2024, 1, 8, 3, 0, tzinfo=eastern)) == datetime(2024, 1, 8, 8, 0, tzinfo=timezone.utc)
        assert as_utc(datetime(2024, 1, 8, 8, 0)).tzinfo is not None
        assert as_utc(None) is None

    def test_overtime_over_eight_hours(self):
        assert compute_overtime(9.5) == 1.5
        assert compute_overtime(8) == 0.0
        assert compute_overtime(None) == 0.0


class TestSubstitutePay:
    def test_full_and_half_day(self):
        assert substitute_pay(160, 6) == 160.0
        assert substitute_pay(160, 5.99) == 80.0
        assert substitute_pay(160, None) == 80.0

    def test_no_rate(self):
        assert substitute_pay(None, 7) is None


class TestStageUpdate:
    def test_stamps_actor_time_and_notes(self):
        data = stage_update(TIME_CARD_RULES["approve-admin"], user_id="u1", notes="looks right")
        assert data["status"] == "admin_approved"
        assert data["current_approval_stage"] == "payroll"
        assert data["approved_by_admin"] == "u1"
        assert data["admin_notes"] == "looks right"
        assert isinstance(data["admin_approved_at"], datetime)

    def test_reject_notes_go_to_current_stage(self):
        data = stage_update(
            TIME_CARD_RULES["reject"], user_id="u1", notes="wrong week", current_stage="administrator"
        )
        assert data == {"status": "rejected", "admin_notes": "wrong week"}

    def test_reject_never_touches_general_notes(self):
        for current_stage in ("secretary", "employee", "payroll", None):
            data = stage_update(TIME_CARD_RULES["reject"], notes="x", current_stage=current_stage)
            assert "notes" not in data


class TestLetterRendering:
    def test_only_known_placeholders_replaced(self):
        employee = Employee(
            employee_id="T-7",
            first_name="Ana",
            last_name="Silva",
            email="ana@district.org",
            department="Science",
            position="Teacher",
            employee_type="teacher",
            hire_date=date(2023, 1, 9),
            salary=None,
        )
        values = employee_values(employee, now=datetime(2024, 5, 1, 9, 0))
        content, used = render_template("{{fullName}} / {{salary}} / {{unknown}} / {{currentYear}}", values)
        assert content == "Ana Silva /  / {{unknown}} / 2024"
        assert used == {"fullName": "Ana Silva", "salary": "", "currentYear": "2024"}

    def test_values_are_not_substituted_twice(self):
        values = {"firstName": "{{email}}", "email": "ana@district.org"}
        content, used = render_template("Dear {{firstName}}, write to {{email}}", values)
        assert content == "Dear {{email}}, write to ana@district.org"
        assert used == {"firstName": "{{email}}", "email": "ana@district.org"}
