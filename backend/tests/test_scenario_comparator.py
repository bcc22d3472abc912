"""
Scenario Comparator Tests

Tests verify:
1. Delta sizing per scenario kind (signs, thresholds, caps)
2. Current vs. after snapshots and clamping of absolute ranges
3. Top blockers from requirement data, with placeholder fallback
4. Lead times, training load and plan shape
5. Scenario inputs: clamping, titles and query-parameter round trip
"""

import pytest

from app.models.readiness import (
    AddStation,
    IncreaseDemand,
    IssueType,
    LineRequirements,
    PlanOwner,
    RemoveCapacity,
    ScenarioKind,
    ScenarioReadinessStatus,
    Severity,
    SkillRef,
    SkillRequirement,
    StationRef,
    scenario_from_params,
)
from app.services.readiness.scenario_comparator import (
    _DELTAS,
    compare,
    lead_time,
    placeholder_blockers,
    relevant_issues,
    resolve_top_blockers,
)

from conftest import make_issue


@pytest.fixture
def assembly_requirements():
    return LineRequirements(
        line="Assembly",
        stations=(
            StationRef(id="st-torque", name="Torque Cell"),
            StationRef(id="st-pack", name="Packing"),
        ),
        skills=(
            SkillRef(id="sk-trq", code="TRQ", name="Torque tools"),
            SkillRef(id="sk-esd", code=None, name="ESD handling"),
            SkillRef(id="sk-vis"),
        ),
        requirements=(
            SkillRequirement(station_id="st-torque", skill_id="sk-trq"),
            SkillRequirement(station_id="st-torque", skill_id="sk-esd"),
            SkillRequirement(station_id="st-pack", skill_id="sk-vis"),
            SkillRequirement(station_id="st-pack", skill_id="sk-vis"),
        ),
    )


# =============================================================================
# WORKED EXAMPLE
# =============================================================================

class TestRemoveCapacity:
    """RemoveCapacity adds min(4, n) BLOCKING units."""

    def test_worked_example(self, assembly_issues):
        result = compare(RemoveCapacity(line="Assembly", people_removed=2), assembly_issues)

        assert result.current.fragility == 41
        assert result.delta.fragility == 50
        assert result.after.fragility == 91

    def test_cost_and_time_ranges(self, assembly_issues):
        result = compare(RemoveCapacity(line="Assembly", people_removed=2), assembly_issues)

        assert (result.current.cost.min, result.current.cost.max) == (21_000, 84_000)
        assert (result.current.time.min, result.current.time.max) == (12, 36)
        assert (result.delta.cost.min, result.delta.cost.max) == (30_000, 120_000)
        assert (result.after.cost.min, result.after.cost.max) == (51_000, 204_000)
        assert (result.after.time.min, result.after.time.max) == (28, 84)

    @pytest.mark.parametrize("people", [1, 2, 3, 4, 7])
    def test_delta_at_least_one_blocking_unit(self, people):
        result = compare(RemoveCapacity(line="Assembly", people_removed=people), [])
        assert result.delta.fragility >= 25

    def test_people_capped_at_four(self):
        four = compare(RemoveCapacity(line="Assembly", people_removed=4), [])
        ten = compare(RemoveCapacity(line="Assembly", people_removed=10), [])

        assert ten.delta.fragility == four.delta.fragility == 100
        assert ten.delta.cost == four.delta.cost

    def test_after_fragility_capped(self, assembly_issues):
        result = compare(RemoveCapacity(line="Assembly", people_removed=10), assembly_issues)
        assert result.after.fragility == 100

    def test_blocked_when_gaps_exist(self, assembly_issues):
        result = compare(RemoveCapacity(line="Assembly", people_removed=2), assembly_issues)

        assert result.readiness.status == ScenarioReadinessStatus.BLOCKED
        assert "Backfill required before execution" in result.readiness.bullets

    def test_ready_without_gaps(self):
        result = compare(RemoveCapacity(line="Assembly", people_removed=1), [])

        assert result.readiness.status == ScenarioReadinessStatus.READY
        assert result.after.time_to_readiness_weeks == 1
        assert result.after.training_load.label == "—"

    def test_zero_people_plan_has_no_change_outcome(self):
        result = compare(RemoveCapacity(line="Assembly", people_removed=0), [])

        assert result.delta.fragility == 0
        assert result.plan[0].outcome == "No measurable change in exposure."

    def test_board_summary(self, assembly_issues):
        result = compare(RemoveCapacity(line="Assembly", people_removed=2), assembly_issues)
        assert result.summary == (
            "Fragility from 41 to 91; cost exposure from 21 000–84 000 SEK "
            "to 51 000–204 000 SEK."
        )


# =============================================================================
# ADD STATION
# =============================================================================

class TestAddStation:
    """AddStation removes one WARNING unit."""

    def test_delta_is_non_positive(self, assembly_issues):
        result = compare(AddStation(station_id="st-asm-1", line="Assembly"), assembly_issues)

        assert result.delta.fragility == -8
        assert result.delta.cost.min <= 0 and result.delta.cost.max <= 0
        assert result.delta.time.min <= 0 and result.delta.time.max <= 0

    def test_after_from_baseline(self, assembly_issues):
        result = compare(AddStation(station_id="st-asm-1", line="Assembly"), assembly_issues)

        assert result.after.fragility == 33
        assert (result.after.cost.min, result.after.cost.max) == (18_000, 72_000)
        assert result.after.time_to_readiness_weeks == 2
        assert result.delta.time_to_readiness_weeks == 1

    def test_after_clamped_on_empty_baseline(self):
        result = compare(AddStation(station_id="st-new"), [])

        assert result.current.fragility == 0
        assert result.after.fragility == 0
        assert result.after.cost.min == 0
        assert result.after.cost.max == 0
        assert result.after.time.min >= 0
        assert result.after.cost.min <= result.after.cost.max

    def test_training_load_and_readiness(self):
        result = compare(AddStation(station_id="st-new"), [])

        assert result.after.training_load.label == "2 people × 1 level upgrade"
        assert result.readiness.status == ScenarioReadinessStatus.PARTIALLY_READY
        assert len(result.readiness.bullets) == 2

    def test_station_specific_blockers(self, assembly_requirements):
        scenario = AddStation(station_id="st-torque", line="Assembly")
        result = compare(scenario, [], assembly_requirements)

        assert result.top_blockers == ("TRQ at Torque Cell", "ESD handling at Torque Cell")
        # No scoped issues: each blocker is one WARNING unit
        assert result.current.fragility == 16
        assert (result.current.cost.min, result.current.cost.max) == (6_000, 24_000)

    def test_unknown_station_falls_back_to_placeholders(self, assembly_requirements):
        result = compare(AddStation(station_id="st-missing"), [], assembly_requirements)

        assert result.top_blockers == placeholder_blockers(AddStation())
        assert result.current.fragility == 32  # 4 requirement records

    def test_plan_shape(self):
        result = compare(AddStation(station_id="st-new"), [])

        assert len(result.plan) == 4
        assert [item.owner for item in result.plan] == [
            PlanOwner.OPS, PlanOwner.SUPERVISOR, PlanOwner.OPS, PlanOwner.OPS,
        ]
        assert result.plan[0].outcome.startswith("Fragility Δ −8.")
        assert "Cost exposure Δ −3 000–12 000 SEK." in result.plan[0].outcome


# =============================================================================
# INCREASE DEMAND
# =============================================================================

class TestIncreaseDemand:
    """IncreaseDemand escalates to BLOCKING at 20 hours."""

    @pytest.mark.parametrize("hours,expected", [(0, 8), (10, 8), (19.99, 8), (20, 25), (80, 25)])
    def test_escalation_threshold(self, hours, expected):
        result = compare(IncreaseDemand(line="Assembly", delta_hours=hours), [])
        assert result.delta.fragility == expected

    def test_delta_is_non_negative(self, assembly_issues):
        result = compare(IncreaseDemand(line="Assembly", delta_hours=12), assembly_issues)

        assert result.delta.fragility > 0
        assert result.after.fragility == 49
        assert result.delta.cost.min > 0

    @pytest.mark.parametrize("hours,weeks", [(0, 2), (1, 3), (15, 3), (16, 4), (30, 4), (200, 8)])
    def test_lead_time(self, hours, weeks):
        assert lead_time(IncreaseDemand(line="Assembly", delta_hours=hours))[0] == weeks

    def test_plan_shape(self):
        result = compare(IncreaseDemand(line="Assembly", delta_hours=100), [])

        assert len(result.plan) == 5
        assert result.after.time_to_readiness_weeks == 8
        assert result.plan[2].eta_weeks == 4
        assert result.plan[4].eta_weeks == 8
        assert "Time to readiness 8 weeks" in result.readiness.bullets

    def test_line_wide_blockers_are_deduplicated(self, assembly_requirements):
        result = compare(IncreaseDemand(line="Assembly"), [], assembly_requirements)

        assert result.top_blockers == (
            "TRQ at Torque Cell",
            "ESD handling at Torque Cell",
            "sk-vis at Packing",
        )


# =============================================================================
# SCOPE AND INVARIANTS
# =============================================================================

class TestCompareInvariants:
    """Properties that hold for every scenario kind."""

    def test_every_kind_has_a_delta(self):
        assert set(_DELTAS) == set(ScenarioKind)

    def test_scope_is_line_based(self, assembly_issues):
        others = [make_issue("p1", Severity.BLOCKING, IssueType.ILLEGAL, line="Pressline 1")]
        scoped = relevant_issues(IncreaseDemand(line="Assembly"), assembly_issues + others)

        assert [issue.issue_id for issue in scoped] == ["asm-1", "asm-2", "asm-3"]

    def test_resolved_issues_out_of_scope(self):
        issues = [make_issue("r", Severity.BLOCKING, IssueType.NO_GO, resolved=True)]
        assert relevant_issues(RemoveCapacity(line="Assembly"), issues) == ()

    def test_add_station_matches_station_without_line(self, assembly_issues):
        scoped = relevant_issues(AddStation(station_id="st-asm-2"), assembly_issues)
        assert [issue.issue_id for issue in scoped] == ["asm-2"]

    def test_baseline_not_mutated(self, assembly_issues):
        before = list(assembly_issues)
        compare(RemoveCapacity(line="Assembly", people_removed=3), assembly_issues)
        assert assembly_issues == before

    def test_deterministic(self, assembly_issues, assembly_requirements):
        scenario = IncreaseDemand(line="Assembly", delta_hours=25)
        first = compare(scenario, assembly_issues, assembly_requirements)
        second = compare(scenario, assembly_issues, assembly_requirements)
        assert first == second

    def test_remove_capacity_placeholder_names_shift(self):
        result = compare(RemoveCapacity(line="Assembly", shift="Night"), [])
        assert result.top_blockers[0] == "Coverage gap on Night"

    def test_no_requirements_returns_none(self):
        assert resolve_top_blockers(IncreaseDemand(line="Assembly"), None) is None
        assert resolve_top_blockers(
            IncreaseDemand(line="Assembly"), LineRequirements(line="Assembly")
        ) is None

    def test_to_dict_carries_scenario(self, assembly_issues):
        data = compare(RemoveCapacity(line="Assembly", people_removed=2), assembly_issues).to_dict()

        assert data["scenario"]["kind"] == "remove_capacity"
        assert data["scenario"]["params"] == {"t": "remove_capacity", "pr": "2", "sh": "Day", "l": "Assembly"}
        assert data["after"]["fragility"] == 91
        assert data["readiness"]["status"] == "Blocked"
        assert len(data["plan"]) == 4


# =============================================================================
# SCENARIO INPUTS
# =============================================================================

class TestScenarioInputs:
    """Input normalisation and compact parameter form."""

    def test_negative_values_clamped(self):
        assert IncreaseDemand(line="A", delta_hours=-5).delta_hours == 0.0
        assert RemoveCapacity(line="A", people_removed=-3).people_removed == 0

    def test_unparseable_params_become_zero(self):
        scenario = scenario_from_params({"t": "remove_capacity", "pr": "abc", "l": "A"})
        assert scenario.people_removed == 0

        scenario = scenario_from_params({"t": "increase_demand", "dh": "nan", "l": "A"})
        assert scenario.delta_hours == 0.0

    @pytest.mark.parametrize("raw", [float("inf"), float("-inf"), float("nan"), "inf", "1e400", 10 ** 400])
    def test_non_finite_and_overflowing_values_become_zero(self, raw):
        assert IncreaseDemand(line="A", delta_hours=raw).delta_hours == 0.0
        assert RemoveCapacity(line="A", people_removed=raw).people_removed == 0

    def test_non_finite_params_become_zero(self):
        demand = scenario_from_params({"t": "increase_demand", "dh": "inf", "l": "A"})
        capacity = scenario_from_params({"t": "remove_capacity", "pr": "1e400", "l": "A"})

        assert demand.delta_hours == 0.0
        assert capacity.people_removed == 0

    def test_compare_with_infinite_hours_does_not_raise(self, assembly_issues):
        result = compare(IncreaseDemand(line="Assembly", delta_hours=float("inf")), assembly_issues)

        assert result.delta.fragility == 8
        assert result.after.fragility == 49
        assert result.after.time_to_readiness_weeks == 2

    def test_compare_with_huge_finite_hours(self, assembly_issues):
        result = compare(IncreaseDemand(line="Assembly", delta_hours=1e300), assembly_issues)

        assert result.delta.fragility == 25
        assert result.after.time_to_readiness_weeks == 8

    def test_unknown_kind(self):
        assert scenario_from_params({"t": "close_plant"}) is None
        assert scenario_from_params({}) is None

    @pytest.mark.parametrize(
        "scenario",
        [
            AddStation(station_id="st-1", skill_id="sk-1", shift="Night", line="Assembly"),
            IncreaseDemand(line="Assembly", delta_hours=12.5, shift="Evening"),
            RemoveCapacity(line="Pressline 1", people_removed=3),
        ],
    )
    def test_params_round_trip(self, scenario):
        assert scenario_from_params(scenario.to_params()) == scenario

    def test_defaults_from_params(self):
        scenario = scenario_from_params({"t": "increase_demand", "l": "Assembly"})
        assert scenario.delta_hours == 10
        assert scenario.shift == "Day"

    def test_titles(self):
        assert AddStation(station_id="st-1", station_name="Torque Cell", shift="Night").title == (
            "Add station – Torque Cell (Night)"
        )
        assert IncreaseDemand(line="Assembly", delta_hours=10).title == (
            "Increase demand – Assembly +10h (Day)"
        )
        assert RemoveCapacity(line="Assembly", people_removed=2).title == (
            "Remove capacity – Assembly −2 (Day)"
        )
