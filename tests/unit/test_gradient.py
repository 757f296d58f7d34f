import math
import unittest

from src.tools.expression import compile_expression, evaluate
from src.tools.gradient import (
    GradientError,
    PartialDerivative,
    SymbolicGradient,
    derivative_labels,
    from_sympy,
    to_sympy,
)
from src.tools.sampler import sample_grid


class SymbolicGradientTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = SymbolicGradient()

    def test_paraboloid_gradient_matches_closed_form(self) -> None:
        d_dx, d_dy = self.provider.differentiate(compile_expression("x^2 + y^2"))
        grid_x = sample_grid((-5.0, 5.0), (-5.0, 5.0), 11, d_dx)
        grid_y = sample_grid((-5.0, 5.0), (-5.0, 5.0), 11, d_dy)

        for i in range(11):
            for j in range(11):
                self.assertAlmostEqual(grid_x.z[i][j], 2.0 * grid_x.x[i][j], delta=1e-9)
                self.assertAlmostEqual(grid_y.z[i][j], 2.0 * grid_y.y[i][j], delta=1e-9)

    def test_partials_carry_labels(self) -> None:
        partials = self.provider.differentiate(compile_expression("x * y"))
        self.assertIsInstance(partials[0], PartialDerivative)
        self.assertEqual(derivative_labels(partials), ("y", "x"))

    def test_constant_partial_returns_float(self) -> None:
        d_dx, d_dy = self.provider.differentiate(compile_expression("x + 3"))
        self.assertEqual(d_dx(1.0, 2.0), 1.0)
        self.assertEqual(d_dy(1.0, 2.0), 0.0)
        self.assertIsInstance(d_dy(1.0, 2.0), float)

    def test_trigonometric_partials(self) -> None:
        d_dx, d_dy = self.provider.differentiate(compile_expression("sin(x) * y"))
        self.assertAlmostEqual(d_dx(0.3, 2.0), 2.0 * math.cos(0.3), places=12)
        self.assertAlmostEqual(d_dy(0.3, 2.0), math.sin(0.3), places=12)

    def test_sqrt_partial_at_and_beyond_domain_edge(self) -> None:
        d_dx, _ = self.provider.differentiate(compile_expression("sqrt(x) + y"))
        self.assertTrue(math.isnan(d_dx(-1.0, 0.0)))
        self.assertEqual(d_dx(0.0, 0.0), math.inf)
        self.assertAlmostEqual(d_dx(4.0, 0.0), 0.25, places=12)

    def test_rejects_plain_callables(self) -> None:
        with self.assertRaises(TypeError):
            self.provider.differentiate(lambda x, y: x * y)

    def test_gradient_error_is_runtime_error(self) -> None:
        self.assertTrue(issubclass(GradientError, RuntimeError))

    def test_to_sympy_keeps_integers_exact(self) -> None:
        expr = to_sympy(compile_expression("x^2 / 2").node)
        self.assertEqual(str(expr), "x**2/2")

    def test_huge_integer_constants_do_not_raise(self) -> None:
        for text in ("9^999*x", "2^1000 * 2^1000 * x", "10^10^10 * x"):
            with self.subTest(text=text):
                d_dx, d_dy = self.provider.differentiate(compile_expression(text))
                self.assertEqual(d_dx(1.0, 0.0), math.inf)
                self.assertEqual(d_dy(1.0, 0.0), 0.0)

    def test_division_by_zero_in_partials_matches_evaluator(self) -> None:
        d_dx, _ = self.provider.differentiate(compile_expression("log(x)"))
        self.assertEqual(d_dx(0.0, 0.0), compile_expression("1 / x")(0.0, 0.0))
        self.assertEqual(d_dx(0.0, 0.0), math.inf)

        d_dx, _ = self.provider.differentiate(compile_expression("1 / x"))
        self.assertEqual(d_dx(0.0, 0.0), -math.inf)

    def test_overflow_in_partials_keeps_its_sign(self) -> None:
        d_dx, _ = self.provider.differentiate(compile_expression("cosh(200*x)"))
        self.assertEqual(d_dx(-5.0, 0.0), -math.inf)
        self.assertEqual(d_dx(5.0, 0.0), math.inf)

    def test_abs_partial_is_the_sign(self) -> None:
        d_dx, _ = self.provider.differentiate(compile_expression("abs(x)"))
        self.assertEqual([d_dx(-2.0, 0.0), d_dx(0.0, 0.0), d_dx(3.0, 0.0)], [-1.0, 0.0, 1.0])

    def test_named_constants_stay_exact_in_labels(self) -> None:
        self.assertEqual(derivative_labels(self.provider.differentiate(compile_expression("e^x"))), ("exp(x)", "0"))
        self.assertEqual(derivative_labels(self.provider.differentiate(compile_expression("pi*x*y"))), ("pi*y", "pi*x"))

        d_dx, _ = self.provider.differentiate(compile_expression("sin(tau*x)"))
        self.assertEqual(d_dx.label, "2*pi*cos(2*pi*x)")
        self.assertAlmostEqual(d_dx(0.0, 0.0), 2.0 * math.pi, places=12)

    def test_from_sympy_round_trip_evaluates_like_the_source(self) -> None:
        fn = compile_expression("atan(x / y) + sqrt(x^2 + y^2) - log2(x)")
        node = from_sympy(to_sympy(fn.node))
        for x, y in ((1.0, 2.0), (3.5, -0.5), (0.25, 4.0)):
            self.assertAlmostEqual(evaluate(node, x, y), fn(x, y), places=12)


if __name__ == "__main__":
    unittest.main()
