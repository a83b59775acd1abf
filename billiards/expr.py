"""
Safe scalar expressions for angles and slopes.

Grammar (case-insensitive):

    expr  := term (('+' | '-') term)*
    term  := unary (('*' | '/') unary)*
    unary := ('+' | '-') unary | atom
    atom  := NUMBER | 'pi' | FUNC '(' expr ')' | '(' expr ')'
    FUNC  := 'sqrt' | 'sin' | 'cos'

Nothing is ever evaluated as code; unknown names are parse errors.
"""

import math
import re
from typing import List, NamedTuple

from billiards.errors import ExpressionError

INFINITY_WORDS = {'inf', 'infty', 'infinity', '∞'}

CONSTANTS = {'pi': math.pi}


def _sqrt(x: float) -> float:
    if x < 0:
        raise ValueError("sqrt of a negative number")
    return math.sqrt(x)


FUNCTIONS = {'sqrt': _sqrt, 'sin': math.sin, 'cos': math.cos}

_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)
  | (?P<name>[a-z_]+)
  | (?P<op>[-+*/()])
""", re.VERBOSE)


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


def tokenize(text: str) -> List[Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ExpressionError(f"Invalid character {text[pos]!r}", text, pos)
        if m.lastgroup != 'ws':
            tokens.append(Token(m.lastgroup, m.group(), pos))
        pos = m.end()
    tokens.append(Token('end', '', len(text)))
    return tokens


class _Parser:

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.i = 0

    @property
    def tok(self) -> Token:
        return self.tokens[self.i]

    def _error(self, msg: str, tok: Token = None) -> ExpressionError:
        tok = tok or self.tok
        return ExpressionError(msg, self.text, tok.pos)

    def _take(self, text: str):
        if self.tok.text != text:
            found = self.tok.text or 'end of input'
            raise self._error(f"Expected {text!r}, found {found!r}")
        self.i += 1

    def parse(self) -> float:
        if self.tok.kind == 'end':
            raise self._error("Empty expression")
        value = self.expr()
        if self.tok.kind != 'end':
            raise self._error(f"Unexpected {self.tok.text!r}")
        return value

    def expr(self) -> float:
        value = self.term()
        while self.tok.text in ('+', '-'):
            op = self.tok.text
            self.i += 1
            rhs = self.term()
            value = value + rhs if op == '+' else value - rhs
        return value

    def term(self) -> float:
        value = self.unary()
        while self.tok.text in ('*', '/'):
            op_tok = self.tok
            self.i += 1
            rhs = self.unary()
            if op_tok.text == '*':
                value = value * rhs
            else:
                if rhs == 0:
                    raise self._error("Division by zero", op_tok)
                value = value / rhs
        return value

    def unary(self) -> float:
        if self.tok.text == '-':
            self.i += 1
            return -self.unary()
        if self.tok.text == '+':
            self.i += 1
            return self.unary()
        return self.atom()

    def atom(self) -> float:
        tok = self.tok
        if tok.kind == 'number':
            self.i += 1
            return float(tok.text)
        if tok.kind == 'name':
            self.i += 1
            if tok.text in CONSTANTS:
                return CONSTANTS[tok.text]
            if tok.text in FUNCTIONS:
                self._take('(')
                arg = self.expr()
                self._take(')')
                try:
                    return FUNCTIONS[tok.text](arg)
                except (ValueError, OverflowError) as e:
                    raise self._error(f"{tok.text}: {e}", tok) from e
            raise self._error(f"Unknown name {tok.text!r}", tok)
        if tok.text == '(':
            self.i += 1
            value = self.expr()
            self._take(')')
            return value
        found = tok.text or 'end of input'
        raise self._error(f"Unexpected {found!r}")


def parse_scalar_expr(text: str, allow_infinity: bool = False) -> float:
    """Evaluate `text` to a finite float (or +inf when allowed)."""
    s = (text or '').strip().lower()
    if allow_infinity and s in INFINITY_WORDS:
        return math.inf
    value = _Parser(s).parse()
    if not math.isfinite(value):
        raise ExpressionError("Expression did not evaluate to a finite number", s)
    return value
