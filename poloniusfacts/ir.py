"""The in-memory form of a parsed fact program."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union


@dataclass(frozen=True)
class Use:
    """A use of some origins."""

    origins: tuple[str, ...]


@dataclass(frozen=True)
class Outlives:
    """``a: b``: origin ``a`` outlives origin ``b``."""

    a: str
    b: str


@dataclass(frozen=True)
class LoanIssuedAt:
    """A loan is created into an origin."""

    origin: str
    loan: str


@dataclass(frozen=True)
class LoanInvalidatedAt:
    """An action that invalidates a loan."""

    loan: str


@dataclass(frozen=True)
class LoanKilledAt:
    """A loan stops being live."""

    loan: str


@dataclass(frozen=True)
class OriginLiveOnEntry:
    """An origin is live on entry to the statement."""

    origin: str


@dataclass(frozen=True)
class DefineVariable:
    """A variable is overwritten."""

    variable: str


@dataclass(frozen=True)
class UseVariable:
    """A variable is used."""

    variable: str


Fact = Union[
    Outlives,
    LoanIssuedAt,
    LoanInvalidatedAt,
    LoanKilledAt,
    OriginLiveOnEntry,
    DefineVariable,
    UseVariable,
]
Effect = Union[Use, Fact]


@dataclass(frozen=True)
class KnownSubset:
    """A subset relation between placeholders that is known to hold."""

    a: str
    b: str


@dataclass(frozen=True)
class Placeholder:
    """A universal origin and the placeholder loan standing for it."""

    origin: str
    loan: str


@dataclass
class Statement:
    """Effects at a statement's Start point and at its Mid point."""

    effects_start: list = field(default_factory=list)
    effects: list = field(default_factory=list)

    @classmethod
    def from_effects(cls, effects: Iterable[Effect]) -> "Statement":
        """Build a statement from Mid-point effects.

        Whatever is live on entry to the Mid point is also live on entry
        to the Start point, so those effects are copied to the start.
        """
        effects = list(effects)
        start = [effect for effect in effects if isinstance(effect, OriginLiveOnEntry)]
        return cls(effects_start=start, effects=effects)


@dataclass
class Block:
    """A basic block: its statements and its successor blocks."""

    name: str
    statements: list = field(default_factory=list)
    goto: list = field(default_factory=list)


@dataclass
class Input:
    """A whole parsed program."""

    placeholders: list = field(default_factory=list)
    known_subsets: list = field(default_factory=list)
    blocks: list = field(default_factory=list)
    use_of_var_derefs_origin: list = field(default_factory=list)
    drop_of_var_derefs_origin: list = field(default_factory=list)

    @classmethod
    def build(
        cls,
        placeholders: Iterable[str],
        known_subsets: Optional[Iterable[KnownSubset]],
        use_of_var_derefs_origin: Optional[Iterable[tuple[str, str]]],
        drop_of_var_derefs_origin: Optional[Iterable[tuple[str, str]]],
        blocks: Iterable[Block],
    ) -> "Input":
        """Assemble an input; each placeholder origin gets a loan of its own name."""
        return cls(
            placeholders=[Placeholder(origin=origin, loan=origin) for origin in placeholders],
            known_subsets=list(known_subsets or []),
            blocks=list(blocks),
            use_of_var_derefs_origin=list(use_of_var_derefs_origin or []),
            drop_of_var_derefs_origin=list(drop_of_var_derefs_origin or []),
        )