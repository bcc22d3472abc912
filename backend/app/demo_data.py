"""
Readiness Engine - Demo Data
Seed issues and skill requirements for the in-memory runtime.
"""
from datetime import date
from typing import Dict, List

from .models.readiness import Issue, LineRequirements

DEMO_DATE = date(2026, 3, 2)

_ISSUE_ROWS = [
    {
        "issue_id": "demo-asm-01-day-no_go",
        "severity": "BLOCKING",
        "issue_type": "NO_GO",
        "station_id": "st-asm-01",
        "station_code": "ASM-01",
        "station_name": "Final Assembly 1",
        "line": "Assembly",
        "shift_code": "Day",
        "root_cause": {"primary": "NO-GO: competence gap"},
    },
    {
        "issue_id": "demo-asm-02-day-warning",
        "severity": "WARNING",
        "issue_type": "WARNING",
        "station_id": "st-asm-02",
        "station_code": "ASM-02",
        "station_name": "Final Assembly 2",
        "line": "Assembly",
        "shift_code": "Day",
        "root_cause": {"primary": "WARNING: competence gap"},
    },
    {
        "issue_id": "demo-asm-03-day-warning",
        "severity": "WARNING",
        "issue_type": "WARNING",
        "station_id": "st-asm-03",
        "station_code": "ASM-03",
        "station_name": "Torque Check",
        "line": "Assembly",
        "shift_code": "Day",
        "root_cause": {"primary": "WARNING: competence gap"},
    },
    {
        "issue_id": "demo-pl1-01-day-illegal",
        "severity": "BLOCKING",
        "issue_type": "ILLEGAL",
        "station_id": "st-pl1-01",
        "station_code": "PL1-01",
        "station_name": "Press 1 Loader",
        "line": "Pressline 1",
        "shift_code": "Day",
        "root_cause": {"primary": "ILLEGAL: forklift licence expired"},
    },
    {
        "issue_id": "demo-pl2-02-night-unstaffed",
        "severity": "BLOCKING",
        "issue_type": "UNSTAFFED",
        "station_id": "st-pl2-02",
        "station_code": "PL2-02",
        "station_name": "Press 2 Die Change",
        "line": "Pressline 2",
        "shift_code": "Night",
        "root_cause": {"primary": "UNSTAFFED: no rostered operator"},
    },
]

_REQUIREMENTS = {
    "Assembly": {
        "line": "Assembly",
        "stations": [
            {"id": "st-asm-01", "name": "Final Assembly 1"},
            {"id": "st-asm-02", "name": "Final Assembly 2"},
            {"id": "st-asm-03", "name": "Torque Check"},
        ],
        "skills": [
            {"id": "sk-trq", "code": "TRQ", "name": "Torque tooling"},
            {"id": "sk-esd", "code": "ESD", "name": "ESD handling"},
            {"id": "sk-vis", "code": "VIS", "name": "Visual inspection"},
        ],
        "requirements": [
            {"station_id": "st-asm-01", "skill_id": "sk-trq"},
            {"station_id": "st-asm-01", "skill_id": "sk-esd"},
            {"station_id": "st-asm-02", "skill_id": "sk-esd"},
            {"station_id": "st-asm-03", "skill_id": "sk-trq"},
            {"station_id": "st-asm-03", "skill_id": "sk-vis"},
        ],
    },
    "Pressline 1": {
        "line": "Pressline 1",
        "stations": [{"id": "st-pl1-01", "name": "Press 1 Loader"}],
        "skills": [{"id": "sk-flt", "code": "FLT", "name": "Forklift licence"}],
        "requirements": [{"station_id": "st-pl1-01", "skill_id": "sk-flt"}],
    },
}


def demo_issues() -> List[Issue]:
    return [Issue.from_dict({**row, "date": DEMO_DATE.isoformat()}) for row in _ISSUE_ROWS]


def demo_requirements() -> Dict[str, LineRequirements]:
    return {line: LineRequirements.from_dict(data) for line, data in _REQUIREMENTS.items()}
