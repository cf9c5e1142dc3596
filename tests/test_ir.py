import dataclasses

import pytest

from poloniusfacts.ir import (
    Block,
    DefineVariable,
    Input,
    KnownSubset,
    LoanInvalidatedAt,
    LoanIssuedAt,
    OriginLiveOnEntry,
    Outlives,
    Placeholder,
    Statement,
    Use,
)


def test_from_effects_copies_live_origins_to_start():
    effects = [
        LoanIssuedAt(origin="'a", loan="L0"),
        OriginLiveOnEntry(origin="'b"),
        Outlives(a="'a", b="'b"),
        OriginLiveOnEntry(origin="'c"),
    ]
    statement = Statement.from_effects(effects)
    assert statement.effects == effects
    assert statement.effects_start == [
        OriginLiveOnEntry(origin="'b"),
        OriginLiveOnEntry(origin="'c"),
    ]


def test_from_effects_without_live_origins_has_empty_start():
    statement = Statement.from_effects([LoanInvalidatedAt(loan="L0"), Use(origins=("'a",))])
    assert statement.effects_start == []
    assert statement.effects == [LoanInvalidatedAt(loan="L0"), Use(origins=("'a",))]


def test_from_effects_accepts_any_iterable():
    statement = Statement.from_effects(iter([OriginLiveOnEntry(origin="'d")]))
    assert statement.effects == statement.effects_start == [OriginLiveOnEntry(origin="'d")]


def test_build_makes_placeholder_loans_named_after_origins():
    built = Input.build(["'a", "'b"], None, None, None, [])
    assert built.placeholders == [
        Placeholder(origin="'a", loan="'a"),
        Placeholder(origin="'b", loan="'b"),
    ]


def test_build_defaults_missing_sections_to_empty():
    built = Input.build([], None, None, None, [])
    assert built.known_subsets == []
    assert built.use_of_var_derefs_origin == []
    assert built.drop_of_var_derefs_origin == []
    assert built.blocks == []


def test_build_keeps_given_sections():
    subsets = [KnownSubset(a="'a", b="'b")]
    uses = [("V1", "'a")]
    drops = [("V2", "'b")]
    blocks = [Block(name="B0")]
    built = Input.build(["'a"], subsets, uses, drops, blocks)
    assert built.known_subsets == subsets
    assert built.use_of_var_derefs_origin == uses
    assert built.drop_of_var_derefs_origin == drops
    assert [block.name for block in built.blocks] == ["B0"]


def test_effects_compare_by_kind_and_fields():
    assert Outlives(a="'a", b="'b") == Outlives(a="'a", b="'b")
    assert (Outlives(a="'a", b="'b") == KnownSubset(a="'a", b="'b")) is False
    assert (DefineVariable(variable="V1") == DefineVariable(variable="V2")) is False


def test_effects_are_immutable():
    effect = LoanIssuedAt(origin="'a", loan="L0")
    with pytest.raises(dataclasses.FrozenInstanceError):
        effect.loan = "L1"
    assert effect.loan == "L0"
    assert effect == LoanIssuedAt(origin="'a", loan="L0")


def test_new_block_has_no_statements_or_successors():
    block = Block(name="B3")
    assert block.statements == []
    assert block.goto == []