"""
HTTP API tests for attendance, leave and reports.

Tests:
  - clock-in / clock-out status codes (200, 409, 404) and response shape
  - employees cannot act on or read other employees' data
  - leave lifecycle over HTTP, including 403 for employees deciding and 409 on re-decision
  - validation errors → 422 with field names
"""

from __future__ import annotations

import uuid

from httpx import AsyncClient

from hris.core.errors import Conflict, Forbidden, NotFound, StoreFailure, ValidationError


class TestAttendanceApi:
    async def test_clock_in_and_out(self, client: AsyncClient, employee: dict, clock) -> None:
        resp = await client.post(
            "/api/attendance/clock-in",
            json={"location": " Main office "},
            headers=employee["headers"],
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["employee_id"] == str(employee["employee_id"])
        assert data["date"] == "2024-03-01"
        assert data["status"] == "present"
        assert data["clock_in_location"] == "Main office"
        assert data["clock_out"] is None

        resp = await client.post(
            "/api/attendance/clock-in", json={}, headers=employee["headers"]
        )
        assert resp.status_code == 409, resp.text
        assert resp.json()["detail"] == "Already clocked in today"

        clock.set(2024, 3, 1, 17, 30)
        resp = await client.post(
            "/api/attendance/clock-out", json={}, headers=employee["headers"]
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["clock_out"] is not None

        resp = await client.post(
            "/api/attendance/clock-out", json={}, headers=employee["headers"]
        )
        assert resp.status_code == 409, resp.text

        resp = await client.get(
            f"/api/attendance/stats/{employee['employee_id']}",
            params={"month": 3, "year": 2024},
            headers=employee["headers"],
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["average_hours_worked"] == 8.5

    async def test_clock_out_without_clock_in(self, client: AsyncClient, employee: dict) -> None:
        resp = await client.post(
            "/api/attendance/clock-out", json={}, headers=employee["headers"]
        )
        assert resp.status_code == 404, resp.text
        assert resp.json()["detail"] == "No clock-in record found for today"

    async def test_employee_cannot_clock_in_for_someone_else(
        self, client: AsyncClient, employee: dict, other_employee: dict
    ) -> None:
        resp = await client.post(
            "/api/attendance/clock-in",
            json={"employee_id": str(other_employee["employee_id"])},
            headers=employee["headers"],
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["employee_id"] == str(employee["employee_id"])

    async def test_manager_clocks_in_on_behalf(
        self, client: AsyncClient, employee: dict, manager: dict
    ) -> None:
        resp = await client.post(
            "/api/attendance/clock-in",
            json={"employee_id": str(employee["employee_id"])},
            headers=manager["headers"],
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["employee_id"] == str(employee["employee_id"])

        resp = await client.get(
            f"/api/attendance/today/{employee['employee_id']}", headers=manager["headers"]
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["date"] == "2024-03-01"

    async def test_today_without_record_is_null(self, client: AsyncClient, employee: dict) -> None:
        resp = await client.get(
            f"/api/attendance/today/{employee['employee_id']}", headers=employee["headers"]
        )
        assert resp.status_code == 200, resp.text
        assert resp.json() is None

    async def test_list_is_scoped_for_employees(
        self, client: AsyncClient, employee: dict, other_employee: dict, manager: dict
    ) -> None:
        for person in (employee, other_employee):
            resp = await client.post(
                "/api/attendance/clock-in", json={}, headers=person["headers"]
            )
            assert resp.status_code == 200, resp.text

        resp = await client.get("/api/attendance/", headers=employee["headers"])
        assert resp.status_code == 200, resp.text
        assert [r["employee_id"] for r in resp.json()] == [str(employee["employee_id"])]
        assert resp.json()[0]["full_name"] == employee["full_name"]

        resp = await client.get("/api/attendance/", headers=manager["headers"])
        assert len(resp.json()) == 2

    async def test_unlinked_account_cannot_clock_in(self, client: AsyncClient, make_person) -> None:
        person = await make_person("employee", linked=False)
        resp = await client.post("/api/attendance/clock-in", json={}, headers=person["headers"])
        assert resp.status_code == 404, resp.text

    async def test_invalid_month(self, client: AsyncClient, employee: dict) -> None:
        resp = await client.get(
            f"/api/attendance/stats/{employee['employee_id']}",
            params={"month": 13},
            headers=employee["headers"],
        )
        assert resp.status_code == 422, resp.text

    async def test_unauthorized(self, client: AsyncClient) -> None:
        resp = await client.post("/api/attendance/clock-in", json={})
        assert resp.status_code == 401, resp.text


class TestLeaveApi:
    async def _submit(self, client: AsyncClient, person: dict, **overrides) -> dict:
        body = {
            "leave_type": "annual",
            "start_date": "2024-06-10",
            "end_date": "2024-06-12",
            "reason": "Family trip",
        }
        body.update(overrides)
        resp = await client.post("/api/leave/", json=body, headers=person["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def test_full_lifecycle(self, client: AsyncClient, employee: dict, manager: dict) -> None:
        created = await self._submit(client, employee)
        assert created["days_requested"] == 3
        assert created["status"] == "pending"
        assert created["employee_id"] == str(employee["employee_id"])

        resp = await client.put(
            f"/api/leave/{created['id']}/status",
            json={"status": "approved"},
            headers=manager["headers"],
        )
        assert resp.status_code == 200, resp.text
        decided = resp.json()
        assert decided["status"] == "approved"
        assert decided["approver_id"] == str(manager["employee_id"])
        assert decided["approved_at"] is not None

        resp = await client.put(
            f"/api/leave/{created['id']}/status",
            json={"status": "rejected", "rejection_reason": "too late"},
            headers=manager["headers"],
        )
        assert resp.status_code == 409, resp.text

        resp = await client.get("/api/leave/", headers=employee["headers"])
        assert resp.status_code == 200, resp.text
        [listed] = resp.json()
        assert listed["full_name"] == employee["full_name"]
        assert listed["position"] == employee["position"]
        assert listed["approver_name"] == manager["full_name"]

        resp = await client.get(
            f"/api/leave/balance/{employee['employee_id']}",
            params={"year": 2024},
            headers=employee["headers"],
        )
        assert resp.status_code == 200, resp.text
        balance = resp.json()
        assert balance["used"]["annual"] == 3
        assert balance["balance"]["annual"] == 9
        assert balance["balance"]["paternity"] == 7

    async def test_employee_cannot_decide(
        self, client: AsyncClient, employee: dict
    ) -> None:
        created = await self._submit(client, employee)
        resp = await client.put(
            f"/api/leave/{created['id']}/status",
            json={"status": "approved"},
            headers=employee["headers"],
        )
        assert resp.status_code == 403, resp.text

    async def test_decide_unknown_request(self, client: AsyncClient, admin: dict) -> None:
        resp = await client.put(
            f"/api/leave/{uuid.uuid4()}/status",
            json={"status": "approved"},
            headers=admin["headers"],
        )
        assert resp.status_code == 404, resp.text

    async def test_validation_errors_name_fields(
        self, client: AsyncClient, employee: dict
    ) -> None:
        resp = await client.post(
            "/api/leave/",
            json={
                "leave_type": "sabbatical",
                "start_date": "2024-06-12",
                "end_date": "2024-06-10",
                "reason": "",
            },
            headers=employee["headers"],
        )
        assert resp.status_code == 422, resp.text
        fields = {e["field"] for e in resp.json()["errors"]}
        assert fields == {"leave_type", "end_date", "reason"}

    async def test_list_and_get_are_scoped(
        self, client: AsyncClient, employee: dict, other_employee: dict, manager: dict
    ) -> None:
        mine = await self._submit(client, employee)
        theirs = await self._submit(client, other_employee, leave_type="sick")

        resp = await client.get("/api/leave/", headers=employee["headers"])
        assert [r["id"] for r in resp.json()] == [mine["id"]]

        resp = await client.get(f"/api/leave/{theirs['id']}", headers=employee["headers"])
        assert resp.status_code == 404, resp.text

        resp = await client.get(f"/api/leave/{theirs['id']}", headers=manager["headers"])
        assert resp.status_code == 200, resp.text
        assert resp.json()["leave_type"] == "sick"

        resp = await client.get(
            "/api/leave/", params={"status": "pending"}, headers=manager["headers"]
        )
        assert len(resp.json()) == 2


class TestReportsApi:
    async def test_employee_summary(
        self, client: AsyncClient, employee: dict, manager: dict
    ) -> None:
        resp = await client.post("/api/attendance/clock-in", json={}, headers=employee["headers"])
        assert resp.status_code == 200, resp.text

        resp = await client.get(
            f"/api/reports/employees/{employee['employee_id']}", headers=manager["headers"]
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["attendance"]["total_days"] == 1
        assert data["attendance"]["month"] == 3
        assert data["leave"]["year"] == 2024
        assert data["leave"]["balance"]["annual"] == 12


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestErrorPayloads:
    def test_validation_error_status_and_fields(self) -> None:
        exc = ValidationError.for_field("month", "Month must be between 1 and 12")
        assert exc.status_code == 422
        assert exc.to_payload() == {
            "detail": "Validation failed",
            "errors": [{"field": "month", "message": "Month must be between 1 and 12"}],
        }

    def test_status_codes(self) -> None:
        assert NotFound("x").status_code == 404
        assert Conflict("x").status_code == 409
        assert Forbidden("x").status_code == 403
        assert StoreFailure("x").status_code == 500
