"""Turning a textual fact program into a set of input facts."""

from __future__ import annotations

from .facts import AllFacts, Point
from .intern import InternerTables
from .ir import (
    DefineVariable,
    LoanInvalidatedAt,
    LoanIssuedAt,
    LoanKilledAt,
    Outlives,
    UseVariable,
)
from .parser import parse_input


def _start(block: str, index: int) -> str:
    return f'"Start({block}[{index}])"'


def _mid(block: str, index: int) -> str:
    return f'"Mid({block}[{index}])"'


def _emit_fact(facts: dict[str, set], fact, point: Point, tables: InternerTables) -> None:
    if isinstance(fact, LoanIssuedAt):
        origin = tables.origins.intern(fact.origin)
        loan = tables.loans.intern(fact.loan)
        facts["loan_issued_at"].add((origin, loan, point))
    elif isinstance(fact, Outlives):
        origin_a = tables.origins.intern(fact.a)
        origin_b = tables.origins.intern(fact.b)
        facts["subset_base"].add((origin_a, origin_b, point))
    elif isinstance(fact, LoanKilledAt):
        facts["loan_killed_at"].add((tables.loans.intern(fact.loan), point))
    elif isinstance(fact, LoanInvalidatedAt):
        facts["loan_invalidated_at"].add((point, tables.loans.intern(fact.loan)))
    elif isinstance(fact, DefineVariable):
        facts["var_defined_at"].add((tables.variables.intern(fact.variable), point))
    elif isinstance(fact, UseVariable):
        facts["var_used_at"].add((tables.variables.intern(fact.variable), point))


def parse_from_program(program: str, tables: InternerTables) -> AllFacts:
    """Parse a fact program into deduplicated, sorted input facts.

    Each statement has a Start and a Mid point; an edge joins them, another
    joins the previous statement's Mid to this Start, and a block's last Mid
    point has an edge to the Start of every block it jumps to.
    Raises :class:`poloniusfacts.parser.ParseError` on malformed input.
    """
    parsed = parse_input(program)
    facts: dict[str, set] = {name: set() for name in AllFacts.relation_names()}

    facts["universal_region"].update(
        tables.origins.intern(p.origin) for p in parsed.placeholders
    )
    facts["placeholder"].update(
        (tables.origins.intern(p.origin), tables.loans.intern(p.loan))
        for p in parsed.placeholders
    )
    facts["drop_of_var_derefs_origin"].update(
        (tables.variables.intern(variable), tables.origins.intern(origin))
        for variable, origin in parsed.drop_of_var_derefs_origin
    )
    facts["use_of_var_derefs_origin"].update(
        (tables.variables.intern(variable), tables.origins.intern(origin))
        for variable, origin in parsed.use_of_var_derefs_origin
    )
    facts["known_subset"].update(
        (tables.origins.intern(subset.a), tables.origins.intern(subset.b))
        for subset in parsed.known_subsets
    )

    for block in parsed.blocks:
        name = block.name
        terminator_idx = len(block.statements) - 1
        for statement_idx, statement in enumerate(block.statements):
            start = tables.points.intern(_start(name, statement_idx))
            mid = tables.points.intern(_mid(name, statement_idx))

            if statement_idx > 0:
                previous_mid = tables.points.intern(_mid(name, statement_idx - 1))
                facts["cfg_edge"].add((previous_mid, start))

            facts["cfg_edge"].add((start, mid))

            for target in block.goto:
                source = tables.points.intern(_mid(name, terminator_idx))
                destination = tables.points.intern(_start(target, 0))
                facts["cfg_edge"].add((source, destination))

            for effect in statement.effects:
                _emit_fact(facts, effect, mid, tables)
            for effect in statement.effects_start:
                _emit_fact(facts, effect, start, tables)

    return AllFacts(**{name: sorted(rows) for name, rows in facts.items()})