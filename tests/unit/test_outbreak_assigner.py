"""Unit tests for outbreak assignment over the organisation unit tree"""
import pytest

from case_copy.domain.exceptions import OutbreakLookupError
from case_copy.domain.model import OrganisationUnit, Outbreak, TrackedEntityInstance
from case_copy.services.outbreak_assigner import (
    assign_outbreak,
    find_outbreak_for_location,
    index_outbreaks_by_location,
)


ORG_UNITS = [
    OrganisationUnit("U1"),
    OrganisationUnit("U2", parent_id="U1"),
    OrganisationUnit("U3", parent_id="U2"),
]


def units_by_id(units):
    return {ou.id: ou for ou in units}


def test_assign_walks_up_to_ancestor_outbreak():
    """U3 -> U2 -> U1, only U1 is covered by an outbreak"""
    assign = assign_outbreak([Outbreak("O1", ("U1",))], ORG_UNITS)

    tei = assign(TrackedEntityInstance(id="T1", org_unit_id="U3"))

    assert tei.outbreak == "O1"
    assert tei.id == "T1"


def test_assign_returns_new_instance():
    """Assignment does not modify the incoming tracked entity"""
    original = TrackedEntityInstance(id="T1", org_unit_id="U3")

    assigned = assign_outbreak([Outbreak("O1", ("U1",))], ORG_UNITS)(original)

    assert original.outbreak is None
    assert assigned is not original


def test_assign_is_idempotent():
    assign = assign_outbreak([Outbreak("O1", ("U1",)), Outbreak("O2", ("U2",))], ORG_UNITS)
    tei = TrackedEntityInstance(id="T1", org_unit_id="U3")

    assert assign(tei).outbreak == assign(tei).outbreak == "O2"


def test_direct_hit_does_not_look_at_org_units():
    """A location present in the index resolves without any parent lookup"""
    available = index_outbreaks_by_location([Outbreak("O3", ("U3",))])

    # No organisation units at all: any parent walk would fail
    assert find_outbreak_for_location(available, {}, "U3") == "O3"


def test_nearest_ancestor_wins():
    outbreaks = [Outbreak("O1", ("U1",)), Outbreak("O2", ("U2",))]

    assign = assign_outbreak(outbreaks, ORG_UNITS)

    assert assign(TrackedEntityInstance(id="T1", org_unit_id="U3")).outbreak == "O2"
    assert assign(TrackedEntityInstance(id="T2", org_unit_id="U1")).outbreak == "O1"


def test_first_outbreak_of_location_wins():
    outbreaks = [Outbreak("O-first", ("U1",)), Outbreak("O-second", ("U1",))]

    assign = assign_outbreak(outbreaks, ORG_UNITS)

    assert assign(TrackedEntityInstance(id="T1", org_unit_id="U2")).outbreak == "O-first"


def test_only_first_location_is_indexed():
    """Outbreaks are indexed by their first location id only"""
    index = index_outbreaks_by_location([
        Outbreak("O1", ("U2", "U1")),
        Outbreak("O2", ()),
    ])

    assert list(index) == ["U2"]
    assert [o.id for o in index["U2"]] == ["O1"]


def test_root_without_outbreak_raises():
    assign = assign_outbreak([Outbreak("O1", ("elsewhere",))], ORG_UNITS)

    with pytest.raises(OutbreakLookupError) as excinfo:
        assign(TrackedEntityInstance(id="T1", org_unit_id="U3"))

    assert excinfo.value.org_unit_id == "U3"
    assert "U1" in str(excinfo.value)


def test_unknown_org_unit_raises():
    assign = assign_outbreak([Outbreak("O1", ("U1",))], ORG_UNITS)

    with pytest.raises(OutbreakLookupError):
        assign(TrackedEntityInstance(id="T1", org_unit_id="U99"))


def test_cycle_in_parents_raises_instead_of_looping():
    cyclic = [
        OrganisationUnit("A", parent_id="B"),
        OrganisationUnit("B", parent_id="C"),
        OrganisationUnit("C", parent_id="A"),
    ]
    available = index_outbreaks_by_location([Outbreak("O1", ("elsewhere",))])

    with pytest.raises(OutbreakLookupError, match="Cycle") as excinfo:
        find_outbreak_for_location(available, units_by_id(cyclic), "A")

    assert "A -> B -> C -> A" in str(excinfo.value)


def test_deep_tree_resolves_to_root_outbreak():
    depth = 20000
    chain = [OrganisationUnit("U0")] + [
        OrganisationUnit(f"U{i}", parent_id=f"U{i - 1}") for i in range(1, depth)
    ]
    available = index_outbreaks_by_location([Outbreak("O1", ("U0",))])

    assert find_outbreak_for_location(available, units_by_id(chain), f"U{depth - 1}") == "O1"


def test_lookup_error_is_builtin_lookup_error():
    with pytest.raises(LookupError):
        find_outbreak_for_location({}, {}, "missing")
