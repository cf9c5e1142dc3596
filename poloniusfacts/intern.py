"""Intern tables mapping fact strings to small typed integers."""

from __future__ import annotations

from typing import Generic, Iterable, Sequence, TypeVar

from .facts import Loan, Origin, Path, Point, Variable, _Atom

A = TypeVar("A", bound=_Atom)


class Interner(Generic[A]):
    """A two-way mapping between strings and atoms of one kind."""

    def __init__(self, atom_type: type[A]) -> None:
        self.atom_type = atom_type
        self._atoms: dict[str, A] = {}
        self._strings: list[str] = []

    def intern(self, data: str) -> A:
        """Return the atom for ``data``, allocating the next one if it is new."""
        atom = self._atoms.get(data)
        if atom is None:
            atom = self.atom_type(len(self._strings))
            self._strings.append(data)
            self._atoms[data] = atom
        return atom

    def untern(self, atom: A) -> str:
        """Return the string that ``atom`` stands for."""
        if type(atom) is not self.atom_type:
            raise TypeError(
                f"expected a {self.atom_type.__name__}, got {type(atom).__name__}"
            )
        try:
            return self._strings[atom.index()]
        except IndexError:
            raise IndexError(f"{atom!r} has not been interned") from None

    def untern_all(self, atoms: Iterable[A]) -> list[str]:
        """Return the strings for several atoms, in order."""
        return [self.untern(atom) for atom in atoms]

    def __len__(self) -> int:
        return len(self._strings)


class InternerTables:
    """One interner for each kind of atom."""

    def __init__(self) -> None:
        self.origins: Interner[Origin] = Interner(Origin)
        self.loans: Interner[Loan] = Interner(Loan)
        self.points: Interner[Point] = Interner(Point)
        self.variables: Interner[Variable] = Interner(Variable)
        self.paths: Interner[Path] = Interner(Path)
        self._by_type: dict[type, Interner] = {
            table.atom_type: table
            for table in (self.origins, self.loans, self.points, self.variables, self.paths)
        }

    def table_for(self, atom_type: type[A]) -> Interner[A]:
        """Return the interner holding atoms of ``atom_type``."""
        try:
            return self._by_type[atom_type]
        except (KeyError, TypeError):
            raise TypeError(f"no intern table for {atom_type!r}") from None

    def intern_row(self, atom_types: Sequence[type], values: Sequence[str]) -> tuple:
        """Intern each value with the table of its column type."""
        atom_types = tuple(atom_types)
        values = tuple(values)
        if len(atom_types) != len(values):
            raise ValueError(
                f"expected {len(atom_types)} values, got {len(values)}"
            )
        return tuple(
            self.table_for(atom_type).intern(value)
            for atom_type, value in zip(atom_types, values)
        )

    def untern(self, atom: _Atom) -> str:
        """Return the string for an atom of any kind."""
        return self.table_for(type(atom)).untern(atom)