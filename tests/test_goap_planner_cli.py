"""
tests/test_goap_planner_cli.py

Tests for the facade module: plan formatting and the example entry point.
"""

import io

import pytest

import goap_planner
from goap_config import reset_config
from goap_planner import (
    GOAPPlanner,
    build_combat_library,
    combat_goal,
    combat_start_state,
    format_plan,
    print_plan,
)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # main() would otherwise replace the root handlers
    monkeypatch.setattr(goap_planner, "setup_logging", lambda **kwargs: None)
    for name in ("GOAP_MAX_EXPANSIONS", "GOAP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def final_node():
    planner = GOAPPlanner(build_combat_library())
    return planner.find_path(combat_start_state(), combat_goal())


def test_format_plan(final_node):
    assert format_plan(final_node) == "GOTO_COVER -> RELOAD_FROM_COVER -> SHOOT_FROM_COVER"


def test_print_plan(final_node):
    stream = io.StringIO()
    print_plan(final_node, stream=stream)

    assert stream.getvalue() == (
        "\n---FINAL PATH---\nGOTO_COVER -> RELOAD_FROM_COVER -> SHOOT_FROM_COVER\n"
    )


def test_main_prints_plan(capsys):
    assert goap_planner.main() == 0

    out = capsys.readouterr().out
    assert "---FINAL PATH---" in out
    assert "GOTO_COVER -> RELOAD_FROM_COVER -> SHOOT_FROM_COVER" in out


def test_main_reports_missing_plan(capsys, monkeypatch):
    monkeypatch.setenv("GOAP_MAX_EXPANSIONS", "1")

    assert goap_planner.main() == 1
    assert "No plan found" in capsys.readouterr().out
