"""Analysis output and how its relations are written out as text rows."""

from __future__ import annotations

import os
import pathlib
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterator, Optional, TextIO, Union

from .facts import _Atom
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]

# Written every time, in this order.
_ALWAYS_DUMPED = ("errors", "move_errors", "subset_errors")

# Written only when the output was computed with dumping enabled.
_DUMPED_WHEN_ENABLED = (
    "origin_contains_loan_at",
    "origin_contains_loan_anywhere",
    "origin_live_on_entry",
    "loan_invalidated_at",
    "loan_live_at",
    "subset_anywhere",
    "known_contains",
    "var_live_on_entry",
    "var_drop_live_on_entry",
    "path_maybe_initialized_on_exit",
    "path_maybe_uninitialized_on_exit",
    "var_maybe_partly_initialized_on_exit",
)


@dataclass
class Output:
    """Results of a borrow check, keyed by atoms.

    Relations keyed by point map each point to a list, a set or a nested
    mapping of atoms; the remaining ones are keyed by origin.
    """

    errors: dict = field(default_factory=dict)
    subset_errors: dict = field(default_factory=dict)
    move_errors: dict = field(default_factory=dict)
    dump_enabled: bool = False
    loan_live_at: dict = field(default_factory=dict)
    origin_contains_loan_at: dict = field(default_factory=dict)
    origin_contains_loan_anywhere: dict = field(default_factory=dict)
    origin_live_on_entry: dict = field(default_factory=dict)
    loan_invalidated_at: dict = field(default_factory=dict)
    subset: dict = field(default_factory=dict)
    subset_anywhere: dict = field(default_factory=dict)
    var_live_on_entry: dict = field(default_factory=dict)
    var_drop_live_on_entry: dict = field(default_factory=dict)
    path_maybe_initialized_on_exit: dict = field(default_factory=dict)
    path_maybe_uninitialized_on_exit: dict = field(default_factory=dict)
    var_maybe_partly_initialized_on_exit: dict = field(default_factory=dict)
    known_contains: dict = field(default_factory=dict)


def _untern_atom(value: object, tables: InternerTables) -> str:
    if not isinstance(value, _Atom):
        raise TypeError(f"expected an atom, got {value!r}")
    return tables.untern(value)


def _rows(value: object, tables: InternerTables, prefix: tuple) -> Iterator[list[str]]:
    if isinstance(value, _Atom):
        yield [*prefix, tables.untern(value)]
    elif isinstance(value, tuple):
        if not value:
            raise TypeError("cannot dump an empty tuple")
        yield [*prefix, *(_untern_atom(item, tables) for item in value)]
    elif isinstance(value, Mapping):
        for key in sorted(value):
            text = _untern_atom(key, tables)
            yield from _rows(value[key], tables, (*prefix, text))
    elif isinstance(value, (set, frozenset)):
        for item in sorted(value):
            yield from _rows(item, tables, prefix)
    elif isinstance(value, list):
        for item in value:
            yield from _rows(item, tables, prefix)
    else:
        raise TypeError(f"cannot dump a value of type {type(value).__name__}")


def flatten_rows(value: object, tables: InternerTables) -> list[list[str]]:
    """Flatten a relation into rows of strings.

    Mapping keys are visited in sorted order and become leading columns;
    sets are visited in sorted order, lists in their own order.
    """
    return list(_rows(value, tables, ()))


def _width(text: str) -> int:
    return len(text.encode("utf-8"))


def dump_rows(
    name: Optional[str], stream: TextIO, tables: InternerTables, value: object
) -> None:
    """Write a relation as aligned rows, each prefixed by ``name`` if given."""
    rows = flatten_rows(value, tables)
    col_width = max((max(map(_width, row), default=0) for row in rows), default=0)
    for row in rows:
        *not_last, last = row
        line = "".join(
            col + " " * (col_width - _width(col) + 1) for col in not_last
        ) + last
        if name is not None:
            stream.write(f"{name} ")
        stream.write(f"{line}\n")


def _dump_field(
    output: Output,
    relation: str,
    output_dir: Optional[pathlib.Path],
    tables: InternerTables,
) -> None:
    value = getattr(output, relation)
    if output_dir is None:
        stdout = sys.stdout
        stdout.write(f"# {relation}\n")
        dump_rows(relation, stdout, tables, value)
        return
    output_dir.mkdir(parents=True, exist_ok=True)
    with open(output_dir / f"{relation}.facts", "w", encoding="utf-8", newline="\n") as handle:
        dump_rows(None, handle, tables, value)


def dump_output(
    output: Output, output_dir: Optional[PathLike], tables: InternerTables
) -> None:
    """Write the output relations to ``<output_dir>/<name>.facts``, or to stdout."""
    directory = pathlib.Path(output_dir) if output_dir is not None else None
    relations = list(_ALWAYS_DUMPED)
    if output.dump_enabled:
        relations.extend(_DUMPED_WHEN_ENABLED)
    for relation in relations:
        _dump_field(output, relation, directory, tables)