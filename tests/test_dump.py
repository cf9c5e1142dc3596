import io

import pytest

from poloniusfacts.dump import Output, dump_output, dump_rows, flatten_rows
from poloniusfacts.facts import Loan, Point
from poloniusfacts.intern import InternerTables


@pytest.fixture
def tables():
    return InternerTables()


def test_flatten_mapping_of_lists(tables):
    p2 = tables.points.intern("P2")
    p1 = tables.points.intern("P1")
    l1 = tables.loans.intern("L1")
    l0 = tables.loans.intern("L0")
    rows = flatten_rows({p2: [l1], p1: [l1, l0]}, tables)
    # keys are sorted by atom index (P2 interned first), list order kept
    assert rows == [["P2", "L1"], ["P1", "L1"], ["P1", "L0"]]


def test_flatten_nested_mapping_and_sets(tables):
    p = tables.points.intern("P")
    o1 = tables.origins.intern("'a")
    o2 = tables.origins.intern("'b")
    loan_b = tables.loans.intern("Lb")
    loan_a = tables.loans.intern("La")
    value = {p: {o2: {loan_a}, o1: {loan_a, loan_b}}}
    rows = flatten_rows(value, tables)
    assert rows == [
        ["P", "'a", "Lb"],
        ["P", "'a", "La"],
        ["P", "'b", "La"],
    ]


def test_flatten_tuples_in_set(tables):
    p = tables.points.intern("P")
    a = tables.origins.intern("'a")
    b = tables.origins.intern("'b")
    rows = flatten_rows({p: {(b, a), (a, b)}}, tables)
    assert rows == [["P", "'a", "'b"], ["P", "'b", "'a"]]


def test_flatten_rejects_unknown_values(tables):
    with pytest.raises(TypeError):
        flatten_rows({tables.points.intern("P"): [42]}, tables)
    with pytest.raises(TypeError):
        flatten_rows({"not an atom": []}, tables)


def test_flatten_uninterned_atom(tables):
    with pytest.raises(IndexError):
        flatten_rows([Loan(5)], tables)


def test_dump_rows_pads_columns(tables):
    p = tables.points.intern("P1")
    l1 = tables.loans.intern("L1")
    l22 = tables.loans.intern("L22")
    stream = io.StringIO()
    dump_rows(None, stream, tables, {p: [l1, l22]})
    assert stream.getvalue() == "P1  L1\nP1  L22\n"


def test_dump_rows_with_name_prefix(tables):
    p = tables.points.intern("P1")
    loan = tables.loans.intern("L1")
    stream = io.StringIO()
    dump_rows("errors", stream, tables, {p: [loan]})
    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("errors ")
    assert lines[0].split() == ["errors", "P1", "L1"]


def test_dump_rows_empty_value_writes_nothing(tables):
    stream = io.StringIO()
    dump_rows("errors", stream, tables, {})
    assert stream.getvalue() == ""


def test_dump_output_to_directory_default(tmp_path, tables):
    p = tables.points.intern("P1")
    loan = tables.loans.intern("L1")
    output = Output(errors={p: [loan]})
    out_dir = tmp_path / "nested" / "out"
    dump_output(output, out_dir, tables)
    names = sorted(path.name for path in out_dir.iterdir())
    assert names == ["errors.facts", "move_errors.facts", "subset_errors.facts"]
    assert (out_dir / "errors.facts").read_text() == "P1 L1\n"
    assert (out_dir / "move_errors.facts").read_text() == ""


def test_dump_output_to_directory_with_dump_enabled(tmp_path, tables):
    output = Output(dump_enabled=True)
    dump_output(output, tmp_path, tables)
    names = {path.stem for path in tmp_path.iterdir()}
    assert "var_maybe_partly_initialized_on_exit" in names
    assert "known_contains" in names
    assert "errors" in names
    assert all(path.suffix == ".facts" for path in tmp_path.iterdir())
    assert len(names) == 15


def test_dump_output_to_stdout(capsys, tables):
    p = tables.points.intern("P1")
    loan = tables.loans.intern("L1")
    dump_output(Output(errors={p: [loan]}), None, tables)
    out = capsys.readouterr().out
    assert out.splitlines() == [
        "# errors",
        "errors P1 L1",
        "# move_errors",
        "# subset_errors",
    ]


def test_output_defaults_are_independent():
    first = Output()
    second = Output()
    first.errors[Point(0)] = [Loan(0)]
    assert second.errors == {}
    assert first.dump_enabled is False