"""Restricted arithmetic expressions of two variables.

User text is sanitized, parsed with Python's ``ast`` module in ``eval`` mode
(the tree is inspected, never executed) and converted into a small tagged
AST. Evaluation is a plain tree walk with IEEE-754 float semantics: invalid
arithmetic produces ``nan``/``inf`` instead of raising, so a compiled
expression can be sampled over any grid.
"""

from __future__ import annotations

import ast
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Union

from .utils import DEFAULT_MAX_LENGTH, ExpressionError, sanitize_math_expression

VARIABLES = ("x", "y")

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
}

FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "sqrt": math.sqrt,
    "abs": abs,
}

_BINARY_OPS = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Pow: "**",
}

_UNARY_OPS = {
    ast.USub: "-",
    ast.UAdd: "+",
}

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2, "unary": 3, "**": 4}


class ExpressionSyntaxError(ExpressionError):
    """Raised when sanitized text is not a supported arithmetic expression."""


class UnknownSymbolError(ExpressionSyntaxError):
    """Raised when an expression references an unsupported name."""


@dataclass(frozen=True)
class Literal:
    value: float
    # set for named constants such as pi
    name: Optional[str] = None


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class Call:
    name: str
    argument: "Node"


Node = Union[Literal, Variable, BinaryOp, UnaryOp, Call]


def parse_expression(
    text: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> Node:
    """Parses user text into an expression tree.

    Args:
        text: Raw expression such as ``"x^2 + sin(y)"``.
        max_length: Maximum accepted length after normalization.
        blocked_patterns: Substrings rejected outright.

    Returns:
        Root node of the parsed expression.

    Raises:
        SanitizationError: If the text fails character/length validation.
        ExpressionSyntaxError: If the text is not a supported expression.
    """
    sanitized = sanitize_math_expression(text, max_length=max_length, blocked_patterns=blocked_patterns)
    try:
        parsed = ast.parse(sanitized.replace("^", "**"), mode="eval")
    except SyntaxError as exc:
        raise ExpressionSyntaxError("Invalid syntax near column {}.".format(exc.offset or 0)) from exc
    except RecursionError as exc:
        raise ExpressionSyntaxError("Expression is nested too deeply.") from exc
    return _convert(parsed.body)


def _convert(node: ast.AST) -> Node:
    if isinstance(node, ast.Constant):
        value = node.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ExpressionSyntaxError("Only real number literals are allowed.")
        try:
            number = float(value)
        except OverflowError as exc:
            raise ExpressionSyntaxError("Numeric literal is out of range.") from exc
        if not math.isfinite(number):
            raise ExpressionSyntaxError("Numeric literal is out of range.")
        return Literal(number)
    if isinstance(node, ast.Name):
        if node.id in VARIABLES:
            return Variable(node.id)
        if node.id in CONSTANTS:
            return Literal(CONSTANTS[node.id], node.id)
        if node.id in FUNCTIONS:
            raise ExpressionSyntaxError("Function '{}' must be called with one argument.".format(node.id))
        raise UnknownSymbolError("Unknown symbol '{}'.".format(node.id))
    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionSyntaxError("Unsupported operator.")
        return UnaryOp(op, _convert(node.operand))
    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionSyntaxError("Unsupported operator.")
        return BinaryOp(op, _convert(node.left), _convert(node.right))
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ExpressionSyntaxError("Only direct function calls are allowed.")
        name = node.func.id
        if name not in FUNCTIONS:
            raise UnknownSymbolError("Function '{}' is not allowed.".format(name))
        if node.keywords or len(node.args) != 1:
            raise ExpressionSyntaxError("Function '{}' takes exactly one argument.".format(name))
        return Call(name, _convert(node.args[0]))
    raise ExpressionSyntaxError("Unsupported syntax: {}".format(type(node).__name__))


def evaluate(node: Node, x: float, y: float) -> float:
    """Evaluates an expression tree at one point."""
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Variable):
        return float(x) if node.name == "x" else float(y)
    if isinstance(node, UnaryOp):
        value = evaluate(node.operand, x, y)
        return -value if node.op == "-" else value
    if isinstance(node, BinaryOp):
        left = evaluate(node.left, x, y)
        right = evaluate(node.right, x, y)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return _divide(left, right)
        return float_power(left, right)
    if isinstance(node, Call):
        return _apply(node.name, evaluate(node.argument, x, y))
    raise TypeError("Unknown node type: {}".format(type(node).__name__))


def _divide(left: float, right: float) -> float:
    if right != 0.0:
        return left / right
    if left == 0.0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)


def _is_odd_integer(value: float) -> bool:
    return value.is_integer() and value % 2 == 1


def float_power(base: float, exponent: float) -> float:
    """``base ** exponent`` returning signed infinities and ``nan`` instead of raising."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0.0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        # math.pow raises for 0 ** negative and negative ** fractional
        if base == 0.0:
            return math.copysign(math.inf, base) if _is_odd_integer(exponent) else math.inf
        return math.nan


def _sign(value: float) -> float:
    if math.isnan(value):
        return math.nan
    return float((value > 0.0) - (value < 0.0))


# sign only shows up in derivative trees, users cannot type it
_EVALUATION_FUNCTIONS: Dict[str, Callable[[float], float]] = dict(FUNCTIONS, sign=_sign)

_ODD_OVERFLOWING = frozenset({"sinh"})


def _apply(name: str, argument: float) -> float:
    try:
        return float(_EVALUATION_FUNCTIONS[name](argument))
    except OverflowError:
        if name in _ODD_OVERFLOWING:
            return math.copysign(math.inf, argument)
        return math.inf
    except ValueError:
        return math.nan


def format_node(node: Node) -> str:
    """Renders an expression tree back to canonical text."""
    return _format(node, 0)


def _format(node: Node, parent_precedence: int) -> str:
    if isinstance(node, Literal):
        if node.name:
            return node.name
        text = repr(node.value)
        if text.endswith(".0"):
            text = text[:-2]
        return text if node.value >= 0 else "({})".format(text)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Call):
        return "{}({})".format(node.name, _format(node.argument, 0))
    if isinstance(node, UnaryOp):
        precedence = _PRECEDENCE["unary"]
        text = "{}{}".format(node.op, _format(node.operand, precedence))
    else:
        precedence = _PRECEDENCE[node.op]
        if node.op == "**":
            # right-associative
            left = _format(node.left, precedence + 1)
            right = _format(node.right, precedence)
        else:
            left = _format(node.left, precedence)
            right = _format(node.right, precedence + 1)
        text = "{} {} {}".format(left, node.op, right)
    if precedence < parent_precedence:
        return "({})".format(text)
    return text


class ExpressionFunction:
    """Compiled expression callable as ``fn(x, y)``."""

    def __init__(self, text: str, node: Node) -> None:
        self.text = text
        self.node = node

    def __call__(self, x: float, y: float) -> float:
        return evaluate(self.node, x, y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExpressionFunction):
            return NotImplemented
        return self.node == other.node

    def __hash__(self) -> int:
        return hash(self.node)

    def __repr__(self) -> str:
        return "ExpressionFunction({!r})".format(self.text)


def compile_expression(
    text: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> ExpressionFunction:
    node = parse_expression(text, max_length=max_length, blocked_patterns=blocked_patterns)
    return ExpressionFunction(format_node(node), node)
