"""ICP Unfold Tests — forward unfolding, temporaries and constraint injection."""

import pytest

from icp.ast_nodes import Expr, Call, Leaf, var, const, call, count_calls
from icp.errors import MalformedExpression, UnsupportedOperator
from icp.interval import Interval
from icp.ir import OpKind, Statement, is_variable
from icp.parser import parse
from icp.pass1_unfold import unfold, unfold_program, constrain
from icp.symbols import SymbolGenerator


def _assert_defined_before_use(inputs, statements):
    defined = set(inputs)
    for stmt in statements:
        for operand in stmt.variables():
            assert operand in defined, f"{operand} used before definition in {stmt}"
        defined.add(stmt.result)


class TestSymbolGenerator:

    def test_prefix_and_post_increment(self):
        gen = SymbolGenerator()
        assert [gen.next_symbol() for _ in range(3)] == ["t1", "t2", "t3"]
        assert gen.counter == 4

    def test_reset_for_reproducibility(self):
        gen = SymbolGenerator(prefix="tmp", start=7)
        first = gen.next_symbol()
        gen.reset(7)
        assert gen.next_symbol() == first == "tmp7"

    def test_reserved_names_are_skipped(self):
        gen = SymbolGenerator(reserved=["t1", "t3"])
        assert [gen.next_symbol() for _ in range(2)] == ["t2", "t4"]

    def test_generators_are_independent(self):
        a, b = SymbolGenerator(), SymbolGenerator()
        a.next_symbol()
        assert b.next_symbol() == "t1"

    def test_invalid_prefix(self):
        with pytest.raises(ValueError):
            SymbolGenerator(prefix="1")


class TestUnfold:

    def test_leaf_produces_no_statements(self):
        assert unfold(var("x")) == ("x", [])
        assert unfold(const(3)) == (3, [])

    def test_sum_of_squares(self):
        result, statements = unfold(parse("x^2 + y^2"))
        assert result == "t3"
        assert statements == [
            Statement("t1", OpKind.POW, "x", 2),
            Statement("t2", OpKind.POW, "y", 2),
            Statement("t3", OpKind.ADD, "t1", "t2"),
        ]
        assert [str(s) for s in statements] == ["t1 = x ^ 2", "t2 = y ^ 2", "t3 = t1 + t2"]

    def test_left_subtree_fully_before_right(self):
        _, statements = unfold(parse("(a + b) * (c - d)"))
        assert [(s.result, s.op) for s in statements] == [
            ("t1", OpKind.ADD), ("t2", OpKind.SUB), ("t3", OpKind.MUL),
        ]

    @pytest.mark.parametrize("source", [
        "x",
        "x + 1",
        "x * y - z / w",
        "((a + b) * (c + d)) ^ 2 - a * b",
        "x ^ 3 / (y - 2) + x * x",
    ])
    def test_one_statement_per_call_and_ordering(self, source):
        tree = parse(source)
        program = unfold_program(tree)
        assert len(program) == count_calls(tree)
        _assert_defined_before_use(program.inputs, program.statements)

    def test_deterministic_numbering(self):
        tree = parse("x * y + z")
        assert unfold(tree, SymbolGenerator()) == unfold(tree, SymbolGenerator())

    def test_explicit_generator_continues_counting(self):
        gen = SymbolGenerator(start=10)
        result, _ = unfold(parse("x + y"), gen)
        assert result == "t10"
        assert gen.next_symbol() == "t11"

    def test_temporaries_never_shadow_inputs(self):
        result, statements = unfold(parse("t1 + t2"))
        assert result == "t3"
        assert statements[0].left == "t1"

    def test_wrong_arity_is_malformed(self):
        with pytest.raises(MalformedExpression) as exc:
            unfold(Call(op="+", args=(var("x"),)))
        assert exc.value.errors[0].kind.value == "malformed_expression"

    def test_unknown_node_kind_is_malformed(self):
        with pytest.raises(MalformedExpression):
            unfold(call("+", var("x"), Expr()))

    def test_bad_leaf_value_is_malformed(self):
        with pytest.raises(MalformedExpression):
            unfold(Leaf(value=None))
        with pytest.raises(MalformedExpression):
            unfold(Leaf(value=True))

    def test_unknown_operator(self):
        with pytest.raises(UnsupportedOperator):
            unfold(call("%", var("x"), const(2)))

    def test_intersection_symbol_not_accepted_in_trees(self):
        with pytest.raises(UnsupportedOperator):
            unfold(call("∩", var("x"), var("y")))

    def test_program_serializes(self):
        program = unfold_program(parse("x - y"))
        d = program.to_dict()
        assert d["inputs"] == ["x", "y"]
        assert d["output"] == "t1"
        assert d["statements"] == [{"result": "t1", "op": "-", "left": "x", "right": "y"}]
        assert program.temporaries() == ["t1"]


class TestConstrain:

    def test_appends_exactly_one_intersection(self):
        result, statements = unfold(parse("x + y"))
        target = Interval(0.0, 1.0)
        constrained = constrain(statements, result, target)
        assert constrained[:-1] == statements
        assert constrained[-1] == Statement("t1", OpKind.INTERSECT, "t1", target)
        assert str(constrained[-1]) == "t1 = t1 ∩ [0.0, 1.0]"

    def test_input_list_is_not_mutated(self):
        result, statements = unfold(parse("x + y"))
        before = list(statements)
        constrain(statements, result, Interval(0.0, 1.0))
        assert statements == before

    def test_constraining_a_bare_variable(self):
        result, statements = unfold(var("x"))
        constrained = constrain(statements, result, Interval(0.0, 1.0))
        assert len(constrained) == 1
        assert is_variable(constrained[0].result)

    def test_constant_expression_cannot_be_constrained(self):
        result, statements = unfold(const(4))
        with pytest.raises(MalformedExpression):
            constrain(statements, result, Interval(0.0, 1.0))
