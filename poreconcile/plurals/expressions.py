"""Parser for the C-like expressions used in ``Plural-Forms`` headers.

The grammar, from loosest to tightest binding::

    expr     := or ( "?" expr ":" expr )?
    or       := and ( "||" and )*
    and      := equality ( "&&" equality )*
    equality := relation ( ( "==" | "!=" ) relation )*
    relation := sum ( ( "<" | "<=" | ">" | ">=" ) sum )*
    sum      := product ( ( "+" | "-" ) product )*
    product  := unary ( ( "*" | "/" | "%" ) unary )*
    unary    := ( "!" | "-" ) unary | primary
    primary  := integer | "n" | "(" expr ")"

Parentheses only group; they leave no trace in the tree, so
``(n != 1)`` and ``n!=1`` parse to equal trees. Equality is structural:
``n==1`` and ``1==n`` are different trees.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from poreconcile.plurals import FormatError

_TOKEN_RE = re.compile(r"\s*(?:(\d+)|(n)|(\|\||&&|==|!=|<=|>=|[-+*/%<>!?:()]))")

# Binary operators by binding strength; all are left associative.
BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 4,
    "<=": 4,
    ">": 4,
    ">=": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
}
UNARY_OPERATORS = frozenset({"!", "-"})


class Node:
    """Base class of the expression tree.

    Equality and hashing go through :func:`same_expression`, so trees compare
    by shape and values only.
    """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return same_expression(self, other)

    def __hash__(self) -> int:
        return hash(str(self))


@dataclass(frozen=True, eq=False)
class Literal(Node):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Variable(Node):
    name: str = "n"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Unary(Node):
    op: str
    operand: Node

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"


@dataclass(frozen=True, eq=False)
class Binary(Node):
    op: str
    left: Node
    right: Node

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True, eq=False)
class Conditional(Node):
    test: Node
    if_true: Node
    if_false: Node

    def __str__(self) -> str:
        return f"({self.test} ? {self.if_true} : {self.if_false})"


def same_expression(left: Node, right: Node) -> bool:
    """Compare two trees node by node."""
    if isinstance(left, Literal):
        return isinstance(right, Literal) and left.value == right.value
    if isinstance(left, Variable):
        return isinstance(right, Variable) and left.name == right.name
    if isinstance(left, Unary):
        return (
            isinstance(right, Unary)
            and left.op == right.op
            and same_expression(left.operand, right.operand)
        )
    if isinstance(left, Binary):
        return (
            isinstance(right, Binary)
            and left.op == right.op
            and same_expression(left.left, right.left)
            and same_expression(left.right, right.right)
        )
    if isinstance(left, Conditional):
        return (
            isinstance(right, Conditional)
            and same_expression(left.test, right.test)
            and same_expression(left.if_true, right.if_true)
            and same_expression(left.if_false, right.if_false)
        )
    raise TypeError(f"Unknown expression node {left!r}")


def tokenize(text: str) -> list[str]:
    """Split an expression into integer, ``n`` and operator tokens."""
    tokens: list[str] = []
    position = 0
    end = len(text.rstrip())
    while position < end:
        match = _TOKEN_RE.match(text, position)
        if not match:
            raise FormatError(
                f"Unexpected character at offset {position} in plural expression",
                text,
            )
        tokens.append(match.group(match.lastindex or 0))
        position = match.end()
    return tokens


class _Parser:
    """Recursive descent parser with precedence climbing for binary operators."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.position = 0

    def peek(self) -> str | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise FormatError("Unexpected end of plural expression", self.text)
        self.position += 1
        return token

    def expect(self, token: str) -> None:
        found = self.take()
        if found != token:
            raise FormatError(f"Expected {token!r} but found {found!r}", self.text)

    def parse(self) -> Node:
        node = self.conditional()
        if self.peek() is not None:
            raise FormatError(f"Unexpected token {self.peek()!r}", self.text)
        return node

    def conditional(self) -> Node:
        test = self.binary(1)
        if self.peek() != "?":
            return test
        self.take()
        if_true = self.conditional()
        self.expect(":")
        if_false = self.conditional()
        return Conditional(test, if_true, if_false)

    def binary(self, min_precedence: int) -> Node:
        left = self.unary()
        while True:
            op = self.peek()
            precedence = BINARY_PRECEDENCE.get(op or "")
            if precedence is None or precedence < min_precedence:
                return left
            self.take()
            right = self.binary(precedence + 1)
            left = Binary(op, left, right)

    def unary(self) -> Node:
        if self.peek() in UNARY_OPERATORS:
            op = self.take()
            return Unary(op, self.unary())
        return self.primary()

    def primary(self) -> Node:
        token = self.take()
        if token.isdigit():
            return Literal(int(token))
        if token == "n":
            return Variable()
        if token == "(":
            node = self.conditional()
            self.expect(")")
            return node
        raise FormatError(f"Unexpected token {token!r}", self.text)


def parse_expression(text: str) -> Node:
    """Parse a plural expression such as ``(n != 1)``.

    Raises:
        FormatError: If the text is not a valid expression
    """
    return _Parser(text).parse()


def _c_divide(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right >= 0) else -quotient


def evaluate(node: Node, n: int) -> int:
    """Evaluate an expression for ``n`` using C integer semantics."""
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Variable):
        return n
    if isinstance(node, Unary):
        value = evaluate(node.operand, n)
        return int(not value) if node.op == "!" else -value
    if isinstance(node, Conditional):
        branch = node.if_true if evaluate(node.test, n) else node.if_false
        return evaluate(branch, n)
    if isinstance(node, Binary):
        if node.op == "||":
            return int(bool(evaluate(node.left, n)) or bool(evaluate(node.right, n)))
        if node.op == "&&":
            return int(bool(evaluate(node.left, n)) and bool(evaluate(node.right, n)))
        left = evaluate(node.left, n)
        right = evaluate(node.right, n)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return _c_divide(left, right)
        if node.op == "%":
            return left - right * _c_divide(left, right)
        comparisons = {
            "==": left == right,
            "!=": left != right,
            "<": left < right,
            "<=": left <= right,
            ">": left > right,
            ">=": left >= right,
        }
        return int(comparisons[node.op])
    raise TypeError(f"Unknown expression node {node!r}")
