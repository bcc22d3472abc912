"""
HTTP API Tests

Tests verify the FastAPI surface over the demo runtime:
1. Readiness aggregation from the feed and from posted issues
2. Scenario comparison (JSON body and shareable link form)
3. Decision recording, rollback on write failure, and undo
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.runtime import build_demo_runtime, get_runtime


@pytest.fixture
def runtime():
    return build_demo_runtime()


@pytest.fixture
def client(runtime):
    app.dependency_overrides[get_runtime] = lambda: runtime
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


# =============================================================================
# READINESS
# =============================================================================

class TestReadinessEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_all_demo_issues(self, client):
        data = client.get("/readiness").json()

        assert data["fragility_index"] == 91  # 3 * 25 + 2 * 8
        assert data["verdict"] == "NO-GO"
        assert data["counts"] == {
            "total_active": 5,
            "blocking": 3,
            "warning": 2,
            "illegal": 1,
            "unstaffed": 1,
        }
        assert data["subtitle"] == "1 illegal, 1 unstaffed, 3 blocking, 2 at risk"
        assert data["top_stations"][0]["issue_type"] == "ILLEGAL"
        assert data["top_stations"][1]["issue_type"] == "UNSTAFFED"

    def test_filtered_by_line_and_date(self, client):
        data = client.get("/readiness", params={"line": "Assembly", "date": "2026-03-02"}).json()

        assert data["fragility_index"] == 41
        assert data["verdict"] == "NO-GO"
        assert [row["station_name"] for row in data["top_stations"]] == [
            "Final Assembly 1", "Final Assembly 2", "Torque Check",
        ]

    def test_other_date_is_go(self, client):
        data = client.get("/readiness", params={"date": "2026-03-03"}).json()

        assert data["fragility_index"] == 0
        assert data["verdict"] == "GO"
        assert data["subtitle"] == "All stations covered"

    def test_aggregate_posted_issues(self, client):
        response = client.post("/readiness/aggregate", json={
            "issues": [
                {"issue_id": "x1", "issue_type": "ILLEGAL", "shift_code": "Day"},
                {"issue_id": "x2", "issue_type": "WARNING", "shift_code": "Day"},
                {"issue_id": "x3", "issue_type": "NO_GO", "resolved": True},
            ]
        })

        assert response.status_code == 200
        data = response.json()
        assert data["fragility_index"] == 33
        assert data["verdict"] == "NO-GO"
        assert data["counts"]["total_active"] == 2


# =============================================================================
# SCENARIOS
# =============================================================================

class TestScenarioEndpoints:

    def test_remove_capacity_against_live_list(self, client):
        response = client.post("/scenarios/compare", json={
            "kind": "remove_capacity",
            "line": "Assembly",
            "people_removed": 2,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["current"]["fragility"] == 41
        assert data["delta"]["fragility"] == 50
        assert data["after"]["fragility"] == 91
        assert data["top_blockers"] == [
            "TRQ at Final Assembly 1",
            "ESD at Final Assembly 1",
            "ESD at Final Assembly 2",
            "TRQ at Torque Check",
            "VIS at Torque Check",
        ]
        assert data["readiness"]["status"] == "Blocked"

    def test_add_station_uses_station_line_for_requirements(self, client):
        data = client.post("/scenarios/compare", json={
            "kind": "add_station",
            "station_id": "st-asm-01",
        }).json()

        assert data["top_blockers"] == ["TRQ at Final Assembly 1", "ESD at Final Assembly 1"]
        assert data["current"]["fragility"] == 25
        assert data["after"]["fragility"] == 17
        assert data["after"]["training_load"]["label"] == "2 people × 1 level upgrade"

    def test_posted_baseline(self, client):
        data = client.post("/scenarios/compare", json={
            "kind": "increase_demand",
            "line": "Line 9",
            "delta_hours": 40,
            "baseline": [],
        }).json()

        assert data["current"]["fragility"] == 0
        assert data["after"]["fragility"] == 25
        assert data["top_blockers"] == [
            "Select a line to see coverage blockers",
            "Capacity and shift overlap",
        ]
        assert len(data["plan"]) == 5

    def test_requirement_lookup_failure_degrades(self, client, runtime):
        failing = AsyncMock(side_effect=RuntimeError("lookup timed out"))
        with patch.object(runtime.requirements, "for_line", failing):
            response = client.post("/scenarios/compare", json={
                "kind": "remove_capacity",
                "line": "Assembly",
                "shift": "Night",
            })

        assert response.status_code == 200
        data = response.json()
        assert data["top_blockers"][0] == "Coverage gap on Night"
        assert data["current"]["fragility"] == 41
        failing.assert_awaited_once_with("Assembly")

    def test_link_form(self, client):
        data = client.get(
            "/scenarios/compare",
            params={"t": "increase_demand", "l": "Assembly", "dh": "25", "sh": "Day"},
        ).json()

        assert data["scenario"]["kind"] == "increase_demand"
        assert data["scenario"]["params"]["dh"] == "25"
        assert data["delta"]["fragility"] == 25
        assert data["after"]["fragility"] == 66
        assert data["after"]["time_to_readiness_weeks"] == 4

    @pytest.mark.parametrize(
        "params,delta",
        [
            ({"t": "increase_demand", "l": "Assembly", "dh": "inf"}, 8),
            ({"t": "increase_demand", "l": "Assembly", "dh": "nan"}, 8),
            ({"t": "remove_capacity", "l": "Assembly", "pr": "1e400"}, 0),
        ],
    )
    def test_link_form_non_finite_values_clamped(self, client, params, delta):
        response = client.get("/scenarios/compare", params=params)

        assert response.status_code == 200
        data = response.json()
        assert data["delta"]["fragility"] == delta
        assert data["current"]["fragility"] == 41

    def test_link_form_unknown_kind(self, client):
        response = client.get("/scenarios/compare", params={"t": "close_plant"})
        assert response.status_code == 400


# =============================================================================
# DECISIONS
# =============================================================================

class TestDecisionEndpoints:

    def test_record_commits_and_opens_undo_window(self, client, runtime):
        response = client.post("/decisions", json={
            "issue_id": "demo-asm-02-day-warning",
            "action": "acknowledged",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"]["state"] == "COMMITTED"
        assert len(data["issues"]) == 4
        assert data["undo_window"]["active"] is True
        assert data["undo_window"]["issue_id"] == "demo-asm-02-day-warning"
        assert 0 < data["undo_window"]["seconds_remaining"] <= 30
        assert runtime.writer.written[0].station_id == "st-asm-02"

    def test_committed_issue_hidden_on_refresh(self, client):
        client.post("/decisions", json={"issue_id": "demo-asm-02-day-warning", "action": "swap"})

        data = client.get("/readiness").json()
        assert data["fragility_index"] == 83
        assert data["counts"]["warning"] == 1

    def test_undo_restores_issue(self, client):
        client.post("/decisions", json={"issue_id": "demo-asm-02-day-warning", "action": "escalate"})

        undo = client.post("/decisions/undo").json()
        assert undo["restored"] == "demo-asm-02-day-warning"
        assert len(undo["issues"]) == 5

        window = client.get("/decisions/undo-window").json()
        assert window["active"] is False
        assert window["seconds_remaining"] == 0

    def test_undo_without_window(self, client):
        undo = client.post("/decisions/undo").json()
        assert undo["restored"] is None
        assert len(undo["issues"]) == 5

    def test_write_failure_rolls_back(self, client, runtime):
        runtime.writer.fail_with = "Not authenticated"

        response = client.post("/decisions", json={
            "issue_id": "demo-pl1-01-day-illegal",
            "action": "plan_training",
        })

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["message"] == "Not authenticated"
        assert detail["outcome"]["state"] == "ROLLED_BACK"
        assert len(detail["issues"]) == 5
        assert client.get("/decisions/undo-window").json()["active"] is False

    def test_invalid_action(self, client):
        response = client.post("/decisions", json={"issue_id": "demo-asm-02-day-warning", "action": "delete"})
        assert response.status_code == 400
        assert "Invalid action" in response.json()["detail"]

    def test_unknown_issue(self, client):
        response = client.post("/decisions", json={"issue_id": "nope", "action": "acknowledged"})
        assert response.status_code == 404

    def test_list_active_issues(self, client):
        data = client.get("/decisions/issues").json()
        assert data["total"] == 5
        assert {issue["line"] for issue in data["issues"]} == {"Assembly", "Pressline 1", "Pressline 2"}
