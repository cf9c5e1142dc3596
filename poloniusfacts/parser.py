"""Parser for the textual fact-program format."""

from __future__ import annotations

import re
from typing import Callable, NamedTuple, TypeVar

from .ir import (
    Block,
    DefineVariable,
    Input,
    KnownSubset,
    LoanInvalidatedAt,
    LoanIssuedAt,
    LoanKilledAt,
    OriginLiveOnEntry,
    Outlives,
    Statement,
    Use,
    UseVariable,
)

T = TypeVar("T")


class ParseError(ValueError):
    """Raised when a program does not follow the grammar."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"parse error at line {line}, column {column}: {message}")
        self.line = line
        self.column = column


_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<comment>//[^\n]*)
  | (?P<origin>'[A-Za-z0-9_]+)
  | (?P<ident>[A-Za-z0-9_]+)
  | (?P<punct>[{}(),:;/])
    """,
    re.VERBOSE,
)


class _Token(NamedTuple):
    kind: str
    text: str
    line: int
    column: int

    def describe(self) -> str:
        return "end of input" if self.kind == "eof" else repr(self.text)


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    pos = 0
    line = 1
    line_start = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        column = pos - line_start + 1
        if match is None:
            raise ParseError(f"unexpected character {text[pos]!r}", line, column)
        kind = match.lastgroup
        lexeme = match.group()
        if kind in ("origin", "ident", "punct"):
            tokens.append(_Token(kind, lexeme, line, column))
        newlines = lexeme.count("\n")
        if newlines:
            line += newlines
            line_start = match.start() + lexeme.rindex("\n") + 1
        pos = match.end()
    tokens.append(_Token("eof", "", line, pos - line_start + 1))
    return tokens


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    # -- token helpers -------------------------------------------------

    def _peek(self) -> _Token:
        return self._tokens[self._pos]

    def _next(self) -> _Token:
        token = self._peek()
        if token.kind != "eof":
            self._pos += 1
        return token

    @staticmethod
    def _fail(token: _Token, expected: str) -> ParseError:
        return ParseError(
            f"expected {expected}, found {token.describe()}", token.line, token.column
        )

    def _at(self, text: str) -> bool:
        token = self._peek()
        return token.kind in ("ident", "punct") and token.text == text

    def _accept(self, text: str) -> bool:
        if self._at(text):
            self._next()
            return True
        return False

    def _expect(self, text: str) -> None:
        if not self._accept(text):
            raise self._fail(self._peek(), repr(text))

    def _origin(self) -> str:
        token = self._next()
        if token.kind != "origin":
            raise self._fail(token, "an origin")
        return token.text

    def _name(self, what: str) -> str:
        token = self._next()
        if token.kind != "ident":
            raise self._fail(token, what)
        return token.text

    def _comma_list(self, item: Callable[[], T], close: str) -> list[T]:
        items: list[T] = []
        if self._at(close):
            return items
        items.append(item())
        while self._accept(","):
            if self._at(close):
                break
            items.append(item())
        return items

    # -- grammar -------------------------------------------------------

    def input(self) -> Input:
        self._expect("placeholders")
        self._expect("{")
        placeholders = self._comma_list(self._origin, "}")
        self._expect("}")

        known_subsets = None
        if self._accept("known_subsets"):
            self._expect("{")
            known_subsets = self._comma_list(self._known_subset, "}")
            self._expect("}")

        use_of = self._var_origin_section("use_of_var_derefs_origin")
        drop_of = self._var_origin_section("drop_of_var_derefs_origin")

        blocks = []
        while self._accept("block"):
            blocks.append(self._block())
        if self._peek().kind != "eof":
            raise self._fail(self._peek(), "'block' or end of input")
        return Input.build(placeholders, known_subsets, use_of, drop_of, blocks)

    def _known_subset(self) -> KnownSubset:
        a = self._origin()
        self._expect(":")
        b = self._origin()
        return KnownSubset(a=a, b=b)

    def _var_origin_section(self, keyword: str):
        if not self._accept(keyword):
            return None
        self._expect("{")
        pairs = self._comma_list(self._var_origin_pair, "}")
        self._expect("}")
        return pairs

    def _var_origin_pair(self) -> tuple[str, str]:
        self._expect("(")
        variable = self._name("a variable")
        self._expect(",")
        origin = self._origin()
        self._expect(")")
        return (variable, origin)

    def _block(self) -> Block:
        name = self._name("a block name")
        self._expect("{")
        statements = []
        goto: list[str] = []
        while not self._at("}"):
            if self._accept("goto"):
                goto = self._comma_list(lambda: self._name("a block name"), ";")
                self._expect(";")
                break
            statements.append(self._statement())
        self._expect("}")
        return Block(name=name, statements=statements, goto=goto)

    def _statement(self) -> Statement:
        effects = self._effects()
        if self._accept("/"):
            statement = Statement(effects_start=effects, effects=self._effects())
        else:
            statement = Statement.from_effects(effects)
        self._expect(";")
        return statement

    def _effects(self) -> list:
        effects = [self._effect()]
        while self._accept(","):
            effects.append(self._effect())
        return effects

    def _effect(self):
        token = self._next()
        arguments = self._EFFECT_ARGUMENTS.get(token.text) if token.kind == "ident" else None
        if arguments is None:
            raise self._fail(token, "an effect")
        self._expect("(")
        effect = arguments(self)
        self._expect(")")
        return effect

    def _use(self) -> Use:
        return Use(origins=tuple(self._comma_list(self._origin, ")")))

    def _outlives(self) -> Outlives:
        a = self._origin()
        self._expect(":")
        return Outlives(a=a, b=self._origin())

    def _loan_issued_at(self) -> LoanIssuedAt:
        origin = self._origin()
        self._expect(",")
        return LoanIssuedAt(origin=origin, loan=self._name("a loan"))

    def _loan_invalidated_at(self) -> LoanInvalidatedAt:
        return LoanInvalidatedAt(loan=self._name("a loan"))

    def _loan_killed_at(self) -> LoanKilledAt:
        return LoanKilledAt(loan=self._name("a loan"))

    def _origin_live_on_entry(self) -> OriginLiveOnEntry:
        return OriginLiveOnEntry(origin=self._origin())

    def _var_defined_at(self) -> DefineVariable:
        return DefineVariable(variable=self._name("a variable"))

    def _var_used_at(self) -> UseVariable:
        return UseVariable(variable=self._name("a variable"))

    _EFFECT_ARGUMENTS = {
        "use": _use,
        "outlives": _outlives,
        "loan_issued_at": _loan_issued_at,
        "loan_invalidated_at": _loan_invalidated_at,
        "loan_killed_at": _loan_killed_at,
        "origin_live_on_entry": _origin_live_on_entry,
        "var_defined_at": _var_defined_at,
        "var_used_at": _var_used_at,
    }


def parse_input(text: str) -> Input:
    """Parse a fact program into an :class:`Input`, raising :class:`ParseError`."""
    return _Parser(_tokenize(text)).input()