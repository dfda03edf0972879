"""ICP Contractor Tests — build once, apply many times.

Concrete scenarios:
  x^2 + y^2 ∈ [0, 1]  on x, y ∈ [-2, 2]   ->  x, y ∈ [-1, 1]
  x - y ∈ [5, 5]      on x, y ∈ [0, 10]   ->  x ∈ [5, 10], y ∈ [0, 5]
"""

from fractions import Fraction

import pytest

from icp.ast_nodes import Call, var
from icp.contractor import build, is_inconsistent
from icp.errors import MalformedExpression, ParseError, UnsupportedOperator
from icp.interval import Interval, EMPTY
from icp.parser import parse
from icp.registry import OperationRegistry
from icp.symbols import SymbolGenerator
from icp.verify import check_contraction


class TestBuild:

    def test_sum_of_squares_program(self):
        c = build(parse("x^2 + y^2"), Interval(0, 1))
        assert [str(s) for s in c.forward.statements] == [
            "t1 = x ^ 2", "t2 = y ^ 2", "t3 = t1 + t2", "t3 = t3 ∩ [0.0, 1.0]",
        ]
        assert len(c.reverse) == len(c.forward)
        assert c.variables == ("x", "y")
        assert c.forward.output == "t3"

    def test_accepts_source_and_pairs(self):
        c = build("x - y", (5, 5))
        assert c.target == Interval(5, 5)
        assert isinstance(c.expression, Call)

    def test_unsupported_operator(self):
        registry = OperationRegistry.subset(["+", "-"])
        with pytest.raises(UnsupportedOperator):
            build("x * y", (0, 1), registry=registry)

    def test_malformed_expression(self):
        with pytest.raises(MalformedExpression):
            build(Call(op="+", args=(var("x"), var("y"), var("z"))), (0, 1))

    def test_constant_expression(self):
        with pytest.raises(MalformedExpression):
            build("2", (0, 1))

    def test_parse_error(self):
        with pytest.raises(ParseError):
            build("x +", (0, 1))

    def test_uses_given_generator(self):
        c = build("x + y", (0, 1), symbols=SymbolGenerator(prefix="aux"))
        assert c.forward.output == "aux1"

    def test_separate_builds_number_independently(self):
        a = build("x + y", (0, 1))
        b = build("x + y", (0, 1))
        assert a.forward.statements == b.forward.statements


class TestApply:

    def test_unit_disk_bounding_box(self):
        c = build("x^2 + y^2", (0, 1))
        out = c.apply({"x": Interval(-2, 2), "y": Interval(-2, 2)})
        assert out == {"x": Interval(-1, 1), "y": Interval(-1, 1)}

    def test_difference(self):
        c = build("x - y", (5, 5))
        out = c.apply({"x": Interval(0, 10), "y": Interval(0, 10)})
        assert out["x"] == Interval(5, 10)
        assert out["y"] == Interval(0, 5)
        # every retained combination can still reach 5
        assert out["x"].lo - out["y"].hi <= 5 <= out["x"].hi - out["y"].lo

    def test_call_is_apply(self):
        c = build("x + y", (0, 1))
        box = {"x": Interval(0, 5), "y": Interval(0, 5)}
        assert c(box) == c.apply(box)

    def test_input_box_not_mutated(self):
        c = build("x + y", (0, 1))
        box = {"x": Interval(0, 5), "y": Interval(0, 5)}
        c.apply(box)
        assert box == {"x": Interval(0, 5), "y": Interval(0, 5)}

    def test_temporaries_not_returned(self):
        c = build("x * y + x", (0, 1))
        out = c.apply({"x": Interval(0, 2), "y": Interval(0, 2)})
        assert set(out) == {"x", "y"}

    def test_inconsistent_box_short_circuits(self):
        c = build("x^2", (-2, -1))
        out = c.apply({"x": Interval(-2, 2), "z": Interval(0, 1)})
        assert out == {"x": EMPTY, "z": EMPTY}
        assert is_inconsistent(out)

    def test_inconsistency_found_in_reverse_pass(self):
        # forward gives x - x ∈ [-1, 1]; the two projections of x disagree
        c = build("x - x", (1, 1))
        out = c.apply({"x": Interval(0, 1)})
        assert is_inconsistent(out)

    def test_no_narrowing_is_not_inconsistent(self):
        c = build("x + y", (-100, 100))
        box = {"x": Interval(0, 1), "y": Interval(0, 1)}
        out = c.apply(box)
        assert out == box
        assert not is_inconsistent(out)

    def test_missing_variable_is_unbounded(self):
        c = build("x + y", (0, 1))
        out = c.apply({"x": Interval(0, 5)})
        assert out["x"] == Interval(0, 5)
        assert out["y"] == Interval(-5, 1)

    def test_unrelated_keys_pass_through(self):
        c = build("x + 1", (0, 1))
        out = c.apply({"x": Interval(-5, 5), "t1": Interval(100, 200)})
        assert out["x"] == Interval(-1, 0)
        assert out["t1"] == Interval(100, 200)

    def test_repeated_variable(self):
        c = build("x * x", (4, 9))
        out = c.apply({"x": Interval(0, 10)})
        assert out["x"].leq(Interval(0, 10))
        assert out["x"].contains(2) and out["x"].contains(3)
        assert out["x"].lo > 0

    def test_bare_variable(self):
        c = build("x", (0, 1))
        assert c.apply({"x": Interval(-3, 0.5)}) == {"x": Interval(0, 0.5)}

    def test_tuple_box_values(self):
        c = build("x - y", (5, 5))
        out = c.apply({"x": (0, 10), "y": (0, 10)})
        assert out["x"] == Interval(5, 10)

    def test_division_and_literals(self):
        c = build("10 / x", (2, 5))
        out = c.apply({"x": Interval(1, 100)})
        assert out["x"] == Interval(2, 5)

    def test_reusable_across_boxes(self):
        c = build("x + y", (0, 1))
        first = c.apply({"x": Interval(0, 5), "y": Interval(0, 5)})
        second = c.apply({"x": Interval(0.5, 0.75), "y": Interval(-1, 1)})
        assert first == {"x": Interval(0, 1), "y": Interval(0, 1)}
        assert second == {"x": Interval(0.5, 0.75), "y": Interval(-0.75, 0.5)}

    def test_empty_input_interval_empties_every_variable(self):
        c = build("x + y", (0, 1))
        out = c.apply({"x": Interval(0, 5), "y": Interval(0, 5), "z": EMPTY})
        assert out == {"x": EMPTY, "y": EMPTY, "z": EMPTY}
        assert is_inconsistent(out)


class TestDecimalLiterals:
    """Bounds that are not representable as floats are rounded outward."""

    def test_sum_with_decimal_literal(self):
        before = {"x": Interval(-10, 10)}
        out = build("x + 0.3", (1.9, 1.9)).apply(before)
        assert not is_inconsistent(out)
        assert out["x"].contains(Fraction(1.9) - Fraction(0.3))
        assert check_contraction("x + 0.3", (1.9, 1.9), before, out).sound

    def test_second_decimal_sum(self):
        before = {"x": Interval(-10, 10)}
        out = build("x + 0.2", (0.9, 0.9)).apply(before)
        assert out["x"].contains(Fraction(0.9) - Fraction(0.2))
        assert check_contraction("x + 0.2", (0.9, 0.9), before, out).sound

    def test_quotient_with_decimal_literal(self):
        before = {"x": Interval(-10, 10)}
        out = build("x / 0.3", (1.9, 1.9)).apply(before)
        assert out["x"].contains(Fraction(1.9) * Fraction(0.3))
        assert check_contraction("x / 0.3", (1.9, 1.9), before, out).sound

    def test_irrational_root(self):
        before = {"x": Interval(0, 2)}
        out = build("x^2", (2, 2)).apply(before)
        lo, hi = out["x"].lo, out["x"].hi
        assert Fraction(lo) ** 2 <= 2 <= Fraction(hi) ** 2
        assert check_contraction("x^2", (2, 2), before, out).sound
