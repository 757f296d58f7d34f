"""Input validation helpers shared by the expression tools."""

from __future__ import annotations

import re
from typing import Iterable, Optional

DEFAULT_MAX_LENGTH = 400
DEFAULT_BLOCKED_PATTERNS = ("__", "import", "exec", "eval", "lambda")

MATH_EXPR_REGEX = re.compile(r"^[a-zA-Z0-9_+\-*/^().,\s]+$")

_UNICODE_REPLACEMENTS = {
    "−": "-",
    "–": "-",
    "—": "-",
    "×": "*",
    "÷": "/",
    "·": "*",
    "∙": "*",
    "⁄": "/",
    "π": "pi",
}

_SUPERSCRIPT_MAP = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
    "⁺": "+",
    "⁻": "-",
}


class ExpressionError(ValueError):
    """Base class for every failure turning user text into a function."""


class SanitizationError(ExpressionError):
    """Raised when an input expression does not pass validation."""


def sanitize_math_expression(
    expression: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> str:
    if expression is None:
        raise SanitizationError("Expression cannot be empty.")
    normalized = _normalize_math_unicode(str(expression).strip())
    if not normalized:
        raise SanitizationError("Expression cannot be empty.")
    if len(normalized) > max_length:
        raise SanitizationError("Expression exceeds max length of {} characters.".format(max_length))
    if not MATH_EXPR_REGEX.match(normalized):
        raise SanitizationError("Expression contains unsupported characters.")

    patterns = list(blocked_patterns) if blocked_patterns else list(DEFAULT_BLOCKED_PATTERNS)
    lowered = normalized.lower()
    for pattern in patterns:
        if pattern.lower() in lowered:
            raise SanitizationError("Expression contains blocked pattern '{}'.".format(pattern))

    return normalized


def _normalize_math_unicode(expression: str) -> str:
    if not expression:
        return expression

    for source, target in _UNICODE_REPLACEMENTS.items():
        expression = expression.replace(source, target)

    result_chars = []
    i = 0
    while i < len(expression):
        char = expression[i]
        if char in _SUPERSCRIPT_MAP:
            superscript_tokens = []
            while i < len(expression) and expression[i] in _SUPERSCRIPT_MAP:
                superscript_tokens.append(_SUPERSCRIPT_MAP[expression[i]])
                i += 1
            exponent = "".join(superscript_tokens)
            # x⁻¹ must stay a single exponent: x^(-1)
            if len(exponent) > 1 and not exponent.isdigit():
                exponent = "({})".format(exponent)
            result_chars.append("^" + exponent)
            continue

        result_chars.append(char)
        i += 1

    return "".join(result_chars)
