"""Partial derivatives of compiled expressions backed by SymPy.

SymPy differentiates the expression tree symbolically; the derivative is then
converted back into an expression tree and evaluated by the same tree walker
as the function itself, so both follow identical float semantics.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Protocol, Tuple

import sympy as sp

from .expression import BinaryOp, Call, ExpressionFunction, Literal, Node, UnaryOp, Variable, evaluate, float_power

ScalarFunction = Callable[[float, float], float]

_X = sp.Symbol("x", real=True)
_Y = sp.Symbol("y", real=True)

_SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "exp": sp.exp,
    "log": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

_SYMPY_CONSTANTS = {
    "pi": sp.pi,
    "e": sp.E,
    "tau": 2 * sp.pi,
}

_TREE_FUNCTIONS = {
    sp.sin: "sin",
    sp.cos: "cos",
    sp.tan: "tan",
    sp.asin: "asin",
    sp.acos: "acos",
    sp.atan: "atan",
    sp.sinh: "sinh",
    sp.cosh: "cosh",
    sp.tanh: "tanh",
    sp.exp: "exp",
    sp.log: "log",
    sp.Abs: "abs",
    sp.sign: "sign",
}

_TREE_CONSTANTS = {
    sp.pi: Literal(math.pi, "pi"),
    sp.E: Literal(math.e, "e"),
}

# exact integer powers above this many bits are folded to floats
_EXACT_POWER_BITS = 1024


class GradientError(RuntimeError):
    """Raised when a gradient backend cannot differentiate a function."""


class GradientProvider(Protocol):
    def differentiate(self, fn: ScalarFunction) -> Tuple[ScalarFunction, ScalarFunction]:
        ...


class PartialDerivative:
    """Callable partial derivative carrying the text of its expression."""

    def __init__(self, label: str, node: Node) -> None:
        self.label = label
        self.node = node

    def __call__(self, x: float, y: float) -> float:
        return evaluate(self.node, x, y)

    def __repr__(self) -> str:
        return "PartialDerivative({!r})".format(self.label)


def to_sympy(node: Node) -> sp.Expr:
    """Converts an expression tree to a SymPy expression over real ``x``/``y``."""
    if isinstance(node, Literal):
        if node.name in _SYMPY_CONSTANTS:
            return _SYMPY_CONSTANTS[node.name]
        if node.value.is_integer():
            return sp.Integer(int(node.value))
        return sp.Float(node.value)
    if isinstance(node, Variable):
        return _X if node.name == "x" else _Y
    if isinstance(node, UnaryOp):
        operand = to_sympy(node.operand)
        return -operand if node.op == "-" else operand
    if isinstance(node, BinaryOp):
        left = to_sympy(node.left)
        right = to_sympy(node.right)
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return left / right
        if left.is_Number and right.is_Number and not _exact_power_is_cheap(left, right):
            return sp.Float(float_power(_to_float(left), _to_float(right)))
        return left ** right
    if isinstance(node, Call):
        return _SYMPY_FUNCTIONS[node.name](to_sympy(node.argument))
    raise TypeError("Unknown node type: {}".format(type(node).__name__))


def _exact_power_is_cheap(base: sp.Expr, exponent: sp.Expr) -> bool:
    magnitude = abs(_to_float(base))
    if magnitude in (0.0, 1.0):
        return True
    return abs(_to_float(exponent) * math.log2(magnitude)) <= _EXACT_POWER_BITS


def _to_float(expr: sp.Expr) -> float:
    try:
        return float(expr)
    except OverflowError:
        return -math.inf if expr.is_negative else math.inf
    except TypeError:
        # complex constants and zoo
        return math.nan


def from_sympy(expr: sp.Expr) -> Node:
    """Converts a SymPy expression over ``x``/``y`` back into an expression tree.

    Raises:
        ValueError: If the expression holds a term the evaluator cannot walk.
    """
    if expr in _TREE_CONSTANTS:
        return _TREE_CONSTANTS[expr]
    if expr.is_number:
        return Literal(_to_float(expr))
    if expr == _X:
        return Variable("x")
    if expr == _Y:
        return Variable("y")
    if expr.is_Add:
        return _fold("+", expr.args)
    if expr.is_Mul:
        return _fold("*", expr.args)
    if expr.is_Pow:
        base, exponent = expr.args
        if exponent == -1:
            return BinaryOp("/", Literal(1.0), from_sympy(base))
        return BinaryOp("**", from_sympy(base), from_sympy(exponent))
    # arguments are real, so re/conjugate are the identity and im vanishes
    if expr.func in (sp.re, sp.conjugate):
        return from_sympy(expr.args[0])
    if expr.func is sp.im:
        return BinaryOp("*", Literal(0.0), from_sympy(expr.args[0]))
    name = _TREE_FUNCTIONS.get(expr.func)
    if name is not None and len(expr.args) == 1:
        return Call(name, from_sympy(expr.args[0]))
    raise ValueError("unsupported term {}".format(expr))


def _fold(op: str, args: Tuple[sp.Expr, ...]) -> Node:
    nodes: List[Node] = [from_sympy(arg) for arg in args]
    result = nodes[0]
    for node in nodes[1:]:
        result = BinaryOp(op, result, node)
    return result


class SymbolicGradient:
    """Gradient provider differentiating the expression tree with SymPy."""

    def __init__(self, simplify: bool = False) -> None:
        self.simplify = simplify

    def differentiate(self, fn: ScalarFunction) -> Tuple[PartialDerivative, PartialDerivative]:
        if not isinstance(fn, ExpressionFunction):
            raise TypeError("Symbolic differentiation requires a compiled expression, got {}".format(type(fn).__name__))
        try:
            expr = to_sympy(fn.node)
            return self._partial(expr, _X), self._partial(expr, _Y)
        except (TypeError, ValueError, AttributeError, sp.SympifyError) as exc:
            raise GradientError("Could not differentiate '{}': {}".format(fn.text, exc)) from exc

    def _partial(self, expr: sp.Expr, symbol: sp.Symbol) -> PartialDerivative:
        derivative = sp.diff(expr, symbol)
        if self.simplify:
            derivative = sp.simplify(derivative)
        return PartialDerivative(str(derivative), from_sympy(derivative))


def derivative_labels(partials: Tuple[ScalarFunction, ScalarFunction]) -> Tuple[Optional[str], Optional[str]]:
    return getattr(partials[0], "label", None), getattr(partials[1], "label", None)
