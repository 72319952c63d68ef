"""Tests for group option reconciliation, sections and assignment planning."""

import pytest

from modconsole.datatypes.group_datatypes import (
    EnhancedGroupOption,
    ExternalGroupRecord,
    Group,
    GroupOrigin,
    MasterGroup,
)
from modconsole.groups.group_reconciliation import reconcile_group_options
from modconsole.groups.group_sections import plan_group_assignment, section_group_options


def external(gid, name, size=0):
    return ExternalGroupRecord(external_group_id=gid, name=name, member_count=size)


def test_matching_external_and_local_yield_one_both_option():
    options = reconcile_group_options(
        [external("g1", "Book Club")],
        [Group(group_id="L1", name="Book Club", external_group_id="g1")],
        [],
    )

    assert len(options) == 1
    option = options[0]
    assert option.origin is GroupOrigin.BOTH
    assert option.already_assigned is False
    assert option.local_id == "L1"
    assert option.external_group_id == "g1"


def test_local_without_external_id_matches_by_name():
    options = reconcile_group_options(
        [external("g1", "Walkers", size=12)],
        [Group(group_id="L1", name="Walkers")],
        [],
    )

    assert [(o.origin, o.local_id, o.member_count) for o in options] == [(GroupOrigin.BOTH, "L1", 12)]


def test_external_id_mismatch_is_not_matched_by_name():
    options = reconcile_group_options(
        [external("g1", "Walkers")],
        [Group(group_id="L1", name="Walkers", external_group_id="other")],
        [],
    )

    assert sorted(o.origin.value for o in options) == ["external-only", "local-only"]


def test_each_real_group_appears_once():
    externals = [external("g1", "A"), external("g2", "B"), external("g1", "A")]
    locals_ = [
        Group(group_id="L1", name="A", external_group_id="g1"),
        Group(group_id="L2", name="B", external_group_id="g2"),
        Group(group_id="L3", name="C"),
    ]

    options = reconcile_group_options(externals, locals_, [])

    assert len(options) == 3
    assert len({o.option_id for o in options}) == 3


def test_empty_names_never_match_by_name():
    options = reconcile_group_options(
        [external("x1", ""), external("x2", "")],
        [Group(group_id="L1", name="")],
        [],
    )

    origins = {o.option_id: o.origin for o in options}
    assert origins == {
        "ext-x1": GroupOrigin.EXTERNAL_ONLY,
        "ext-x2": GroupOrigin.EXTERNAL_ONLY,
        "local-L1": GroupOrigin.LOCAL_ONLY,
    }
    assert all(o.local_id is None for o in options if o.option_id.startswith("ext-"))


def test_local_group_claimed_once_for_duplicate_names():
    options = reconcile_group_options(
        [external("g1", "Choir"), external("g2", "Choir")],
        [Group(group_id="L1", name="Choir")],
        [],
    )

    origins = sorted(o.origin.value for o in options)
    assert origins == ["both", "external-only"]


def test_assignment_and_sort_order():
    master = MasterGroup(
        master_group_id="M1",
        name="Region",
        groups=(Group(group_id="L2", name="beta", master_group_id="M1"),),
    )
    options = reconcile_group_options(
        [external("g1", "zeta"), external("g3", "Alpha")],
        [
            Group(group_id="L1", name="zeta", external_group_id="g1"),
            Group(group_id="L2", name="beta", master_group_id="M1"),
            Group(group_id="L4", name="delta"),
        ],
        [master],
    )

    assert [(o.name, o.origin.value, o.already_assigned) for o in options] == [
        ("Alpha", "external-only", False),
        ("zeta", "both", False),
        ("delta", "local-only", False),
        ("beta", "local-only", True),
    ]
    assert options[-1].master_group_id == "M1"


def test_external_only_assigned_through_member_external_id():
    master = MasterGroup(
        master_group_id="M1",
        name="Region",
        groups=(Group(group_id="L9", name=None, external_group_id="g5", master_group_id="M1"),),
    )

    options = reconcile_group_options([external("g5", "Runners")], [], [master])

    assert options[0].origin is GroupOrigin.EXTERNAL_ONLY
    assert options[0].already_assigned is True


def test_unnamed_local_group_is_never_listed_alone():
    options = reconcile_group_options([], [Group(group_id="L1", name=None)], [])

    assert options == ()


def test_directory_outage_leaves_local_only_options():
    options = reconcile_group_options([], [Group(group_id="L1", name="Knitting")], [])

    assert [(o.option_id, o.origin) for o in options] == [("local-L1", GroupOrigin.LOCAL_ONLY)]


def test_reconciliation_is_idempotent():
    args = (
        [external("g1", "A"), external("g2", "B")],
        [Group(group_id="L1", name="A", external_group_id="g1"), Group(group_id="L2", name="C")],
        [],
    )

    assert reconcile_group_options(*args) == reconcile_group_options(*args)


class TestSectionsAndPlanning:

    def test_sections_split_by_origin_and_assignment(self):
        options = reconcile_group_options(
            [external("g1", "A"), external("g2", "B")],
            [Group(group_id="L1", name="A", external_group_id="g1"), Group(group_id="L2", name="C")],
            [MasterGroup(master_group_id="M", name="M", groups=(Group(group_id="L2", name="C"),))],
        )

        sections = section_group_options(options)

        assert [o.name for o in sections.external_only] == ["B"]
        assert [o.name for o in sections.both] == ["A"]
        assert sections.local_only == ()
        assert [o.name for o in sections.assigned] == ["C"]
        assert sections.available_count == 2

    def test_plan_for_directory_only_option_creates_local_group(self):
        option = EnhancedGroupOption(
            option_id="ext-g1",
            name="Runners",
            origin=GroupOrigin.EXTERNAL_ONLY,
            external_group_id="g1",
        )

        plan = plan_group_assignment(option, "M1")

        assert plan.create_local is True
        assert plan.external_group_id == "g1"
        assert plan.master_group_id == "M1"

    def test_plan_for_local_option_moves_it(self):
        option = EnhancedGroupOption(option_id="local-L1", name="C", origin=GroupOrigin.LOCAL_ONLY, local_id="L1")

        plan = plan_group_assignment(option, "M1")

        assert plan.create_local is False
        assert plan.local_id == "L1"

    def test_plan_requires_master_group(self):
        option = EnhancedGroupOption(option_id="local-L1", name="C", origin=GroupOrigin.LOCAL_ONLY, local_id="L1")

        with pytest.raises(ValueError):
            plan_group_assignment(option, "")
