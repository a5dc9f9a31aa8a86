"""
Integration tests for department routes -- objective listing, period filter,
analytics and the scorecard page.
"""
import os
import sys
import pytest
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
os.environ.setdefault("DATABASE_URL", "")

pytestmark = pytest.mark.integration

AS_OF = {"as_of": "2025-03-31T12:00:00"}


class TestListDepartments:
    def test_departments(self, client):
        response = client.get("/api/departments")
        assert response.status_code == 200
        assert response.json()["departments"] == [
            "Grafico", "Sales", "Financial", "Agency", "PM Company", "Marketing",
        ]


class TestDepartmentObjectives:
    def test_invalid_department(self, client):
        response = client.get("/api/departments/Legal/objectives")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid department"}

    def test_empty_department(self, client):
        response = client.get("/api/departments/Grafico/objectives", params=AS_OF)
        assert response.status_code == 200
        data = response.json()
        assert data["objectives"] == []
        assert data["period"] is None
        assert data["as_of"] == "2025-03-31T12:00:00"

    def test_cumulative_progress(self, client, create_test_objective):
        create_test_objective(monthly={1: 50, 2: 75, 3: 80}, target_numeric=1000)
        data = client.get("/api/departments/Sales/objectives", params=AS_OF).json()

        objective = data["objectives"][0]
        assert len(objective["values"]) == 3
        assert objective["progress"] == {
            "current_value": 205,
            "progress": 20.5,
            "status": "Behind",
            "is_on_track": False,
            "is_expired": False,
            "days_until_expiry": 275,
        }

    def test_reverse_maintenance_progress(self, client, create_test_objective):
        create_test_objective(
            department="Financial",
            type_objective="Mantenimento",
            target_numeric=5,
            number_format="percentage",
            reverse_logic=True,
            monthly={1: 6.3, 2: 6.1, 3: 5.9},
        )
        objective = client.get("/api/departments/Financial/objectives", params=AS_OF).json()["objectives"][0]
        assert objective["progress"]["current_value"] == 6.1
        assert objective["progress"]["progress"] == 56.0
        assert objective["progress"]["status"] == "Behind"

    def test_expired_and_completed(self, client, create_test_objective):
        create_test_objective(target_numeric=100, end_date="2025-02-28", monthly={1: 60, 2: 60})
        objective = client.get("/api/departments/Sales/objectives", params=AS_OF).json()["objectives"][0]
        assert objective["progress"]["is_expired"] is True
        assert objective["progress"]["status"] == "Completed"

    def test_department_with_space(self, client, create_test_objective):
        create_test_objective(department="PM Company")
        response = client.get("/api/departments/PM Company/objectives", params=AS_OF)
        assert response.status_code == 200
        assert len(response.json()["objectives"]) == 1

    def test_utc_as_of(self, client, create_test_objective):
        create_test_objective(monthly={1: 50, 2: 75, 3: 80}, target_numeric=1000)
        response = client.get("/api/departments/Sales/objectives", params={"as_of": "2025-03-31T12:00:00Z"})
        assert response.status_code == 200
        data = response.json()
        local = datetime(2025, 3, 31, 12, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert data["as_of"] == local.isoformat()
        assert data["objectives"][0]["progress"]["current_value"] == 205
        assert data["objectives"][0]["progress"]["is_expired"] is False


class TestPeriodFilter:
    def test_wrapping_period(self, client, create_test_objective):
        create_test_objective(target_numeric=1000, monthly={11: 100, 12: 200, 1: 300, 2: 400, 6: 999})
        params = dict(AS_OF, start_month=11, end_month=2, year=2025)
        data = client.get("/api/departments/Sales/objectives", params=params).json()

        assert data["period"] == {
            "start_month": 11,
            "end_month": 2,
            "year": 2025,
            "label": "Novembre - Febbraio 2025",
        }
        objective = data["objectives"][0]
        assert sorted(v["month"] for v in objective["values"]) == [1, 2, 11, 12]
        assert objective["progress"]["current_value"] == 1000
        assert objective["progress"]["progress"] == 100
        assert "time_elapsed" in objective

    def test_reverse_logic_uses_linear_formula(self, client, create_test_objective):
        create_test_objective(
            type_objective="Mantenimento", target_numeric=5, reverse_logic=True, monthly={1: 4},
        )
        params = dict(AS_OF, start_month=1, end_month=1, year=2025)
        objective = client.get("/api/departments/Sales/objectives", params=params).json()["objectives"][0]
        assert objective["progress"]["progress"] == 20.0

    def test_partial_parameters(self, client):
        response = client.get("/api/departments/Sales/objectives", params={"start_month": 1, "year": 2025})
        assert response.status_code == 400

    def test_month_out_of_range(self, client):
        response = client.get(
            "/api/departments/Sales/objectives",
            params={"start_month": 1, "end_month": 13, "year": 2025},
        )
        assert response.status_code == 400

    def test_year_out_of_range(self, client):
        response = client.get(
            "/api/departments/Sales/objectives",
            params={"start_month": 1, "end_month": 12, "year": 0},
        )
        assert response.status_code == 400
        assert "year" in response.json()["error"]

    def test_period_with_offset_as_of(self, client, create_test_objective):
        create_test_objective(monthly={1: 100})
        params = {"start_month": 1, "end_month": 3, "year": 2025, "as_of": "2025-03-15T12:00:00+02:00"}
        response = client.get("/api/departments/Sales/objectives", params=params)
        assert response.status_code == 200
        assert "time_elapsed" in response.json()["objectives"][0]


class TestDepartmentAnalytics:
    def test_summary(self, client, create_test_objective):
        create_test_objective(objective_name="A", target_numeric=100, monthly={1: 20}, order_index=0)
        create_test_objective(objective_name="B", target_numeric=100, monthly={1: 90},
                              type_objective="Ultimo mese", order_index=1)
        data = client.get("/api/departments/Sales/analytics", params=AS_OF).json()

        summary = data["department_summary"]
        assert summary["department_name"] == "Sales"
        assert summary["total_objectives"] == 2
        assert summary["overall_progress_average"] == 55.0
        assert summary["count_by_type"] == {"Cumulativo": 1, "Mantenimento": 0, "Ultimo mese": 1}
        assert sum(summary["by_health_status"].values()) == 2
        assert summary["top_performer"] == {"name": "B", "progress": 90}
        assert summary["worst_performer"] == {"name": "A", "progress": 20}

        first = data["objectives"][0]
        assert first["trend"] == "Stable"
        assert first["last_update"] == {"month": "Gennaio", "value": 20}
        assert "expected_progress" in first
        assert "health_status" in first

    def test_empty_department(self, client):
        summary = client.get("/api/departments/Agency/analytics", params=AS_OF).json()["department_summary"]
        assert summary["total_objectives"] == 0
        assert summary["overall_progress_average"] == 0
        assert summary["by_health_status"] == {"Exceeded": 0, "On Track": 0, "At Risk": 0, "Behind": 0}
        assert summary["top_performer"] is None

    def test_corrupt_objective(self, client, create_test_objective):
        from kpi_portal.database import get_db

        objective_id = create_test_objective()
        with get_db() as conn:
            conn.execute("UPDATE objectives SET end_date = 'not-a-date' WHERE id = ?", (objective_id,))

        response = client.get("/api/departments/Sales/analytics")
        assert response.status_code == 422
        assert "end_date" in response.json()["error"]

    def test_offset_as_of(self, client, create_test_objective):
        create_test_objective(monthly={1: 20})
        response = client.get("/api/departments/Sales/analytics", params={"as_of": "2025-03-31T12:00:00+02:00"})
        assert response.status_code == 200
        assert response.json()["department_summary"]["total_objectives"] == 1

    def test_invalid_department(self, client):
        assert client.get("/api/departments/Legal/analytics").status_code == 400


class TestDepartmentPage:
    def test_root_redirects(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/departments/Grafico"

    def test_page_renders(self, client, create_test_objective):
        create_test_objective(objective_name="Fatturato Annuale", monthly={1: 500})
        response = client.get("/departments/Sales", params=AS_OF)
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Fatturato Annuale" in response.text

    def test_page_with_period(self, client):
        response = client.get("/departments/Sales", params={"start_month": 3, "end_month": 3, "year": 2025})
        assert response.status_code == 200
        assert "Marzo 2025" in response.text

    def test_empty_page(self, client):
        response = client.get("/departments/Marketing")
        assert response.status_code == 200
        assert "Nessun obiettivo" in response.text

    def test_invalid_department_page(self, client):
        response = client.get("/departments/Legal")
        assert response.status_code == 400
        assert "text/html" in response.headers["content-type"]

    def test_unknown_page(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert "Page not found" in response.text
