"""Command registry filtering and grouping."""

import pytest

from fleetdeck.navigation.commands import Command, CommandRegistry, group_commands


def _ids(commands):
    return [command.id for command in commands]


def test_empty_query_returns_all_in_registry_order(commands):
    assert _ids(commands.filter("")) == [
        "dashboard",
        "loads",
        "create-load",
        "drivers",
        "add-driver",
        "negotiations",
    ]


def test_keyword_only_match_is_included(commands):
    # Neither title nor description mention shipments.
    assert _ids(commands.filter("shipm")) == ["loads"]
    assert _ids(commands.filter("TEAM")) == ["drivers"]


def test_title_and_description_matches_are_case_insensitive(commands):
    assert _ids(commands.filter("LOAD BOARD")) == ["loads"]
    assert _ids(commands.filter("register a new")) == ["add-driver"]


def test_no_match_returns_empty_list(commands):
    assert commands.filter("zzz-nothing") == []


def test_group_commands_preserves_first_seen_order(commands):
    grouped = group_commands(commands.filter(""))

    assert list(grouped) == ["Navigation", "Actions"]
    assert _ids(grouped["Navigation"]) == ["dashboard", "loads", "drivers", "negotiations"]
    assert _ids(grouped["Actions"]) == ["create-load", "add-driver"]


def test_every_default_command_targets_a_route(commands, routes):
    assert commands.unresolved_targets(routes) == []


def test_unresolved_targets_reports_dead_links(routes):
    registry = CommandRegistry(
        [
            Command("fuel", "Fuel Cards", "Fuel card management", "/fuel-cards", "Fuel", ("fuel",), "Navigation"),
        ]
    )

    assert _ids(registry.unresolved_targets(routes)) == ["fuel"]


def test_trailing_slash_target_is_not_reported(routes):
    registry = CommandRegistry(
        [
            Command("reports", "Reports", "Generate reports", "/reports/", "FileText", (), "Navigation"),
        ]
    )

    assert registry.unresolved_targets(routes) == []


def test_duplicate_command_ids_are_rejected(commands):
    first = commands.get("loads")

    with pytest.raises(ValueError, match="Duplicate command id"):
        CommandRegistry([first, first])
