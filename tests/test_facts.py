import dataclasses

import pytest

from poloniusfacts.facts import AllFacts, Loan, Origin, Path, Point, Variable

ATOMS = [Origin, Loan, Point, Variable, Path]


def test_index_round_trip():
    assert Origin(7).index() == 7
    assert Loan(7).index() == 7
    assert Point(7).index() == 7
    assert Variable(7).index() == 7
    assert Path(7).index() == 7
    assert int(Origin(3)) == 3
    assert int(Path(11)) == 11


def test_equal_atoms_hash_alike():
    mapping = {Origin(4): "o", Loan(4): "l", Point(4): "p", Variable(4): "v", Path(4): "m"}
    assert mapping[Origin(4)] == "o"
    assert mapping[Loan(4)] == "l"
    assert mapping[Point(4)] == "p"
    assert mapping[Variable(4)] == "v"
    assert mapping[Path(4)] == "m"
    assert Point(4) == Point(4)


def test_atoms_of_different_kinds_are_distinct():
    assert (Origin(1) == Loan(1)) is False
    assert len({Origin(1), Loan(1), Point(1)}) == 3


def test_atoms_sort_by_index():
    assert sorted([Point(3), Point(1), Point(2)]) == [Point(1), Point(2), Point(3)]
    assert max([Loan(9), Loan(2)]) == Loan(9)


def test_comparing_different_kinds_raises():
    with pytest.raises(TypeError):
        Origin(1) < Loan(2)


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        Variable(-1)


def test_non_integer_index_rejected():
    with pytest.raises(TypeError):
        Path("3")
    with pytest.raises(TypeError):
        Path(True)


def test_repr_names_the_kind():
    assert repr(Loan(5)) == "Loan(5)"


def test_relation_names_follow_fields():
    names = AllFacts.relation_names()
    assert names == tuple(f.name for f in dataclasses.fields(AllFacts))
    assert names[0] == "loan_issued_at"
    assert names[-1] == "placeholder"


def test_default_facts_are_empty():
    facts = AllFacts()
    assert all(getattr(facts, name) == [] for name in AllFacts.relation_names())


def test_default_relations_are_not_shared():
    first, second = AllFacts(), AllFacts()
    first.cfg_edge.append((Point(0), Point(1)))
    assert second.cfg_edge == []


@pytest.mark.parametrize(
    "name, expected",
    [
        ("loan_issued_at", (Origin, Loan, Point)),
        ("universal_region", (Origin,)),
        ("loan_invalidated_at", (Point, Loan)),
        ("subset_base", (Origin, Origin, Point)),
        ("path_is_var", (Path, Variable)),
        ("placeholder", (Origin, Loan)),
    ],
)
def test_atom_types_of_relations(name, expected):
    assert AllFacts.atom_types(name) == expected


def test_every_relation_has_atom_columns():
    for name in AllFacts.relation_names():
        types = AllFacts.atom_types(name)
        assert types
        assert all(t in ATOMS for t in types)


def test_unknown_relation_raises():
    with pytest.raises(ValueError):
        AllFacts.atom_types("no_such_relation")