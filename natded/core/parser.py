"""
Text to expression.

Grammar, loosest binding first:

    iff      := implies ('<->' iff)?
    implies  := or ('->' implies)?
    or       := and ('|' and)*
    and      := unary ('&' unary)*
    unary    := '~' unary | quantifier | atom
    quantifier := ('forall' | 'exists') NAME (',' | '.')? unary
    atom     := '^|^' | '_|_' | NAME ('(' iff (',' iff)* ')')? | '(' iff ')'

Unicode forms are accepted too: ⊤ ⊥ ¬ ∧ ∨ → ↔ ∀ ∃.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import ParseError
from .expr import (
    And, Or, Implies, Iff, Not, Var, Forall, Exists, TOP, BOTTOM, Expr,
)


@dataclass
class Token:
    type: str
    value: str
    col: int


TOKEN_PATTERNS = [
    ("WHITESPACE", r"\s+"),
    ("TOP",        r"\^\|\^|⊤"),
    ("BOTTOM",     r"_\|_|⊥"),
    ("IFF",        r"<->|↔"),
    ("IMPLIES",    r"->|→"),
    ("AND",        r"&|∧"),
    ("OR",         r"\||∨"),
    ("NOT",        r"~|¬"),
    ("FORALL",     r"∀"),
    ("EXISTS",     r"∃"),
    ("NAME",       r"[A-Za-z_][A-Za-z0-9_']*"),
    ("LPAREN",     r"\("),
    ("RPAREN",     r"\)"),
    ("COMMA",      r","),
    ("DOT",        r"\."),
]

KEYWORDS = {"forall": "FORALL", "exists": "EXISTS"}

_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pat})" for name, pat in TOKEN_PATTERNS))


def tokenize(text: str) -> List[Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise ParseError(f"unexpected character {text[pos]!r}", text, pos + 1)
        kind = match.lastgroup
        value = match.group()
        if kind == "NAME" and value in KEYWORDS:
            kind = KEYWORDS[value]
        if kind != "WHITESPACE":
            tokens.append(Token(kind, value, pos + 1))
        pos = match.end()
    tokens.append(Token("EOF", "", len(text) + 1))
    return tokens


class Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def expect(self, kind: str) -> Token:
        if self.current.type != kind:
            self.fail(f"expected {kind}, got {self.current.value or 'end of input'!r}")
        return self.advance()

    def fail(self, message: str):
        raise ParseError(message, self.text, self.current.col)

    def parse(self):
        if self.current.type == "EOF":
            self.fail("empty expression")
        expr = self.parse_iff()
        if self.current.type != "EOF":
            self.fail(f"unexpected {self.current.value!r}")
        return expr

    def parse_iff(self):
        left = self.parse_implies()
        if self.current.type == "IFF":
            self.advance()
            return Iff(left, self.parse_iff())
        return left

    def parse_implies(self):
        left = self.parse_or()
        if self.current.type == "IMPLIES":
            self.advance()
            return Implies(left, self.parse_implies())
        return left

    def parse_or(self):
        expr = self.parse_and()
        while self.current.type == "OR":
            self.advance()
            expr = Or(expr, self.parse_and())
        return expr

    def parse_and(self):
        expr = self.parse_unary()
        while self.current.type == "AND":
            self.advance()
            expr = And(expr, self.parse_unary())
        return expr

    def parse_unary(self):
        kind = self.current.type
        if kind == "NOT":
            self.advance()
            return Not(self.parse_unary())
        if kind in ("FORALL", "EXISTS"):
            self.advance()
            name = self.expect("NAME").value
            if self.current.type in ("COMMA", "DOT"):
                self.advance()
            body = self.parse_unary()
            return Forall(name, body) if kind == "FORALL" else Exists(name, body)
        return self.parse_atom()

    def parse_atom(self):
        token = self.current
        if token.type == "TOP":
            self.advance()
            return TOP
        if token.type == "BOTTOM":
            self.advance()
            return BOTTOM
        if token.type == "LPAREN":
            self.advance()
            expr = self.parse_iff()
            self.expect("RPAREN")
            return expr
        if token.type == "NAME":
            self.advance()
            if self.current.type != "LPAREN":
                return Var(token.value)
            self.advance()
            args = [self.parse_iff()]
            while self.current.type == "COMMA":
                self.advance()
                args.append(self.parse_iff())
            self.expect("RPAREN")
            return Var(token.value, tuple(args))
        self.fail(f"unexpected {token.value or 'end of input'!r}")


def parse(text: str):
    """Parse text into an expression. Raises ParseError."""
    return Parser(text).parse()


def try_parse(text: str) -> Optional[Expr]:
    """Parse text, or return None if it is not a well-formed expression."""
    try:
        return parse(text)
    except ParseError:
        return None
