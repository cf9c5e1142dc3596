"""Loading fact sets from directories of tab-delimited ``.facts`` files."""

from __future__ import annotations

import os
import pathlib
from typing import Sequence, Union

from .facts import AllFacts
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]


class FactsLoadError(Exception):
    """Raised when a facts file is missing or holds a malformed line."""

    def __init__(self, message: str, path: pathlib.Path, line: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.line = line


def _read_lines(path: pathlib.Path) -> list[str]:
    """Split a file into lines, dropping ``\\n`` or ``\\r\\n`` endings."""
    try:
        with open(path, encoding="utf-8", newline="\n") as handle:
            raw_lines = list(handle)
    except OSError as error:
        raise FactsLoadError(f"Error opening file '{path}': {error}", path) from error
    except UnicodeDecodeError as error:
        raise FactsLoadError(f"Error reading file '{path}': {error}", path) from error
    lines = []
    for raw in raw_lines:
        line = raw[:-1] if raw.endswith("\n") else raw
        if line.endswith("\r"):
            line = line[:-1]
        lines.append(line)
    return lines


def load_tab_delimited_file(
    tables: InternerTables, path: PathLike, atom_types: Sequence[type]
) -> list:
    """Read one relation from ``path``, one row per line, columns split by tabs.

    Rows of a single-column relation are bare atoms; wider rows are tuples.
    """
    path = pathlib.Path(path)
    atom_types = tuple(atom_types)
    rows = []
    for number, line in enumerate(_read_lines(path), start=1):
        columns = line.split("\t")
        if len(columns) < len(atom_types):
            raise FactsLoadError(
                f"error parsing line {number} of `{path}`", path, number
            )
        if len(columns) > len(atom_types):
            raise FactsLoadError(
                f"extra data on line {number} of `{path}`", path, number
            )
        row = tables.intern_row(atom_types, columns)
        rows.append(row[0] if len(row) == 1 else row)
    return rows


def load_tab_delimited_facts(tables: InternerTables, facts_dir: PathLike) -> AllFacts:
    """Load every relation of a fact set from ``<facts_dir>/<relation>.facts``."""
    facts_dir = pathlib.Path(facts_dir)
    relations = {
        name: load_tab_delimited_file(
            tables, facts_dir / f"{name}.facts", AllFacts.atom_types(name)
        )
        for name in AllFacts.relation_names()
    }
    return AllFacts(**relations)