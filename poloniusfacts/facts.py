"""Atom types and the set of input relations that make up a fact set."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field


@functools.total_ordering
class _Atom:
    """A small integer standing for an interned string of one kind."""

    __slots__ = ("_index",)

    def __init__(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"{type(self).__name__} index must be an int, got {index!r}")
        if index < 0:
            raise ValueError(f"{type(self).__name__} index must not be negative, got {index}")
        self._index = index

    def index(self) -> int:
        """Return the position of this atom in its intern table."""
        return self._index

    def __int__(self) -> int:
        return self._index

    def __index__(self) -> int:
        return self._index

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index == other._index  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._index < other._index  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._index))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._index})"


class Origin(_Atom):
    """A region (lifetime) of the analysed program."""

    __slots__ = ()

    def index(self) -> int:
        """Return the position of this origin in the origins table."""
        return self._index


class Loan(_Atom):
    """A borrow created somewhere in the program."""

    __slots__ = ()


class Point(_Atom):
    """A location in the control-flow graph."""

    __slots__ = ()


class Variable(_Atom):
    """A local variable."""

    __slots__ = ()


class Path(_Atom):
    """A move path: a variable or a projection of one."""

    __slots__ = ()


ATOM_TYPES: tuple[type[_Atom], ...] = (Origin, Loan, Point, Variable, Path)

# Relation name -> column types, in the order the relations are loaded.
# Relations with a single column hold bare atoms rather than 1-tuples.
_RELATIONS: dict[str, tuple[type[_Atom], ...]] = {
    "loan_issued_at": (Origin, Loan, Point),
    "universal_region": (Origin,),
    "cfg_edge": (Point, Point),
    "loan_killed_at": (Loan, Point),
    "subset_base": (Origin, Origin, Point),
    "loan_invalidated_at": (Point, Loan),
    "var_defined_at": (Variable, Point),
    "var_used_at": (Variable, Point),
    "var_dropped_at": (Variable, Point),
    "use_of_var_derefs_origin": (Variable, Origin),
    "drop_of_var_derefs_origin": (Variable, Origin),
    "child_path": (Path, Path),
    "path_is_var": (Path, Variable),
    "path_assigned_at_base": (Path, Point),
    "path_moved_at_base": (Path, Point),
    "path_accessed_at_base": (Path, Point),
    "known_subset": (Origin, Origin),
    "placeholder": (Origin, Loan),
}


@dataclass
class AllFacts:
    """Every input relation of the borrow check, as lists of rows."""

    loan_issued_at: list = field(default_factory=list)
    universal_region: list = field(default_factory=list)
    cfg_edge: list = field(default_factory=list)
    loan_killed_at: list = field(default_factory=list)
    subset_base: list = field(default_factory=list)
    loan_invalidated_at: list = field(default_factory=list)
    var_defined_at: list = field(default_factory=list)
    var_used_at: list = field(default_factory=list)
    var_dropped_at: list = field(default_factory=list)
    use_of_var_derefs_origin: list = field(default_factory=list)
    drop_of_var_derefs_origin: list = field(default_factory=list)
    child_path: list = field(default_factory=list)
    path_is_var: list = field(default_factory=list)
    path_assigned_at_base: list = field(default_factory=list)
    path_moved_at_base: list = field(default_factory=list)
    path_accessed_at_base: list = field(default_factory=list)
    known_subset: list = field(default_factory=list)
    placeholder: list = field(default_factory=list)

    @staticmethod
    def relation_names() -> tuple[str, ...]:
        """Names of all relations, in loading order."""
        return tuple(_RELATIONS)

    @staticmethod
    def atom_types(name: str) -> tuple[type[_Atom], ...]:
        """Column types of the relation called ``name``."""
        try:
            return _RELATIONS[name]
        except KeyError:
            raise ValueError(f"unknown relation {name!r}") from None