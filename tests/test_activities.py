from __future__ import annotations

import pytest

from services.activities import (
    ACTIVITIES,
    MAX_SELECT_OPTIONS,
    Activity,
    options_at,
    parse_path,
    resolve_activity,
    validate_custom_activity,
    walk_path,
)


def _walk_all(nodes, depth=0):
    for node in nodes:
        yield node, depth
        yield from _walk_all(node.options, depth + 1)


def test_catalog_fits_select_menus_and_leaves_have_member_counts():
    assert len(ACTIVITIES) <= MAX_SELECT_OPTIONS
    for node, _depth in _walk_all(ACTIVITIES):
        assert len(node.options) <= MAX_SELECT_OPTIONS
        assert len(node.name) <= 100
        if node.is_leaf:
            assert 1 <= node.max_members <= 99


def test_parse_path_and_walk():
    assert parse_path("") == []
    assert parse_path("0-2-1") == [0, 2, 1]
    chain = walk_path("0-0")
    assert [node.name for node in chain] == ["Destiny 2", "Raids"]
    assert options_at("") == ACTIVITIES
    assert options_at("0") == ACTIVITIES[0].options


@pytest.mark.parametrize("raw", ["a", "0--1", "-1", "0-99"])
def test_bad_paths_raise(raw):
    with pytest.raises(ValueError):
        walk_path(raw)


def test_resolve_activity_builds_title_and_subtitle():
    resolved = resolve_activity("0-0-0")

    assert resolved.title == "Destiny 2"
    assert resolved.subtitle == "Raids - Salvation's Edge"
    assert resolved.max_members == 6


def test_resolve_root_leaf_has_empty_subtitle():
    index = next(i for i, node in enumerate(ACTIVITIES) if node.is_leaf)

    resolved = resolve_activity(str(index))

    assert resolved.title == ACTIVITIES[index].name
    assert resolved.subtitle == ""


def test_resolve_activity_rejects_groups():
    with pytest.raises(ValueError):
        resolve_activity("0")


def test_resolve_activity_uses_given_catalog():
    catalog = (Activity("Board Games", options=(Activity("Chess", 2),)),)

    assert resolve_activity("0-0", catalog).subtitle == "Chess"


def test_validate_custom_activity_accepts_bounds():
    resolved = validate_custom_activity("  My Game ", "", "99")

    assert resolved.title == "My Game"
    assert resolved.subtitle == ""
    assert resolved.max_members == 99
    assert validate_custom_activity("x" * 35, "y" * 50, "1").max_members == 1


@pytest.mark.parametrize(
    "title,subtitle,members",
    [
        ("", "", "4"),
        ("x" * 36, "", "4"),
        ("Game", "y" * 51, "4"),
        ("Game", "", "0"),
        ("Game", "", "100"),
        ("Game", "", "four"),
    ],
)
def test_validate_custom_activity_rejects_out_of_bounds(title, subtitle, members):
    with pytest.raises(ValueError):
        validate_custom_activity(title, subtitle, members)
