from __future__ import annotations

from project_dashboard.models.project import Project
from project_dashboard.services.filtering import ProjectFilter, apply_filter


def _projects() -> list[Project]:
    return [
        Project(id="0", status="En curso", type="A", assignee="Laura Gómez", client="Acme"),
        Project(id="1", status="Pendiente", type="A", assignee="Marc Puig", client="Acme Iberia"),
        Project(id="2", status="Completado", type="A", assignee="laura", client="Globex"),
        Project(id="3", status="N/A", type="A", assignee="", client=""),
    ]


def test_empty_filter_keeps_everything_in_order():
    projects = _projects()
    assert apply_filter(projects, ProjectFilter()) == projects
    assert apply_filter(projects) == projects


def test_person_substring_case_insensitive():
    assert [p.id for p in apply_filter(_projects(), ProjectFilter(person="LAU"))] == ["0", "2"]


def test_client_substring_case_insensitive():
    assert [p.id for p in apply_filter(_projects(), ProjectFilter(client="acme"))] == ["0", "1"]


def test_status_equality():
    assert [p.id for p in apply_filter(_projects(), ProjectFilter(status="Pendiente"))] == ["1"]
    assert [p.id for p in apply_filter(_projects(), ProjectFilter(status="en curso"))] == ["0"]
    assert apply_filter(_projects(), ProjectFilter(status="curso")) == []


def test_all_criteria_must_match():
    flt = ProjectFilter(person="laura", client="acme", status="En curso")
    assert [p.id for p in apply_filter(_projects(), flt)] == ["0"]


def test_blank_fields_never_match_non_empty_criteria():
    assert "3" not in [p.id for p in apply_filter(_projects(), ProjectFilter(person="a"))]


def test_from_mapping_normalizes_input():
    flt = ProjectFilter.from_mapping({"person": "  laura ", "client": None, "extra": 1})
    assert flt == ProjectFilter(person="laura", client="", status="")
    assert ProjectFilter.from_mapping(None).is_empty
