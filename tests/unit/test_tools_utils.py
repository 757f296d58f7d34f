import unittest

from src.tools.utils import ExpressionError, SanitizationError, sanitize_math_expression


class ToolsUtilsTestCase(unittest.TestCase):
    def test_sanitization_keeps_plain_expression(self) -> None:
        self.assertEqual(sanitize_math_expression("  x ** 2 + y  "), "x ** 2 + y")

    def test_sanitization_blocks_unsafe_pattern(self) -> None:
        with self.assertRaises(SanitizationError):
            sanitize_math_expression("__import__('os')")

    def test_sanitization_blocks_configured_pattern(self) -> None:
        with self.assertRaises(SanitizationError):
            sanitize_math_expression("eval(x)")

    def test_sanitization_rejects_empty_and_long_input(self) -> None:
        with self.assertRaises(SanitizationError):
            sanitize_math_expression("   ")
        with self.assertRaises(SanitizationError):
            sanitize_math_expression("x+" * 30 + "y", max_length=20)

    def test_sanitization_rejects_unsupported_characters(self) -> None:
        with self.assertRaises(SanitizationError):
            sanitize_math_expression("x > y")

    def test_sanitization_normalizes_unicode_math(self) -> None:
        normalized = sanitize_math_expression("x³ + 2×x − 1")
        self.assertEqual(normalized, "x^3 + 2*x - 1")

    def test_sanitization_groups_signed_superscripts(self) -> None:
        self.assertEqual(sanitize_math_expression("x⁻¹ + π"), "x^(-1) + pi")

    def test_sanitization_error_is_expression_error(self) -> None:
        self.assertTrue(issubclass(SanitizationError, ExpressionError))
        self.assertTrue(issubclass(ExpressionError, ValueError))


if __name__ == "__main__":
    unittest.main()
