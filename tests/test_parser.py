# test_parser.py
import logging
import unittest

import pytest

from fcalc.builder import FormulaBuilder, build_expression
from fcalc.config import CalcConfig
from fcalc.errors import (
    BraceMismatchError, FormulaError, NestingTooDeepError, StructureError, TokenizeError,
)
from fcalc.math_ast import OpNode, evaluate
from fcalc.tokenizer import Token, TokenKind, tokenize


class TestBuildExpression(unittest.TestCase):
    def test_parse(self):
        node = build_expression("1 + 2")
        self.assertEqual(node.left.value, 1)
        self.assertEqual(node.right.value, 2)
        self.assertEqual(node.op, '+')

    def test_precedence(self):
        node = build_expression("2 + 3 * 4")
        self.assertEqual(node.op, '+')
        self.assertEqual(node.right.op, '*')
        self.assertEqual(evaluate(node), 14.0)

    def test_left_to_right(self):
        node = build_expression("8 - 3 - 2")
        self.assertEqual(node.op, '-')
        self.assertEqual(node.left.op, '-')
        self.assertEqual(node.right.value, 2)
        self.assertEqual(evaluate(node), 3.0)

    def test_grouping(self):
        node = build_expression("( 2 + 3 ) * 4")
        self.assertEqual(node.op, '*')
        self.assertEqual(node.left.op, '+')
        self.assertEqual(evaluate(node), 20.0)

    def test_nested_grouping(self):
        self.assertEqual(evaluate(build_expression("( ( 1 + 2 ) * ( 3 + 4 ) )")), 21.0)

    def test_remainder(self):
        self.assertEqual(evaluate(build_expression("10 % 3")), 1.0)
        self.assertEqual(evaluate(build_expression("7.9 % 2")), 1.0)

    def test_single_number(self):
        self.assertEqual(evaluate(build_expression("42")), 42.0)
        self.assertEqual(evaluate(build_expression("( ( 42 ) )")), 42.0)

    def test_children_are_complete(self):
        def walk(n):
            if isinstance(n, OpNode):
                self.assertTrue(n.is_complete())
                walk(n.left)
                walk(n.right)
        walk(build_expression("1 - 2 * ( 3 + 4 ) / 5 % 6 + 7"))

    def test_repeated_evaluation(self):
        node = build_expression("( 1.5 + 2 ) * 3 - 4 / 8")
        values = {evaluate(node) for _ in range(5)}
        self.assertEqual(values, {10.0})


@pytest.mark.parametrize("expr, expected", [
    ("1 + 2 * 3 - 4", 3.0),
    ("2 * 3 + 4 * 5 - 6", 20.0),
    ("1 + 2 - 3 * 4 * 5", -57.0),
    ("100 / 10 / 5", 2.0),
    ("2 * 3 % 4", 2.0),
    ("7 - 2 + 1", 6.0),
    ("2 * ( 3 + 4 ) * 5", 70.0),
    ("-3 * 2", -6.0),
    ("1e2 + .5", 100.5),
    ("( 1 + 2 ) * 3 - ( 4 - 5 ) * 6", 15.0),
    ("10 - ( 2 + 3 ) * 2 % 4", 8.0),
])
def test_evaluate_expressions(expr, expected):
    assert evaluate(build_expression(expr)) == expected


@pytest.mark.parametrize("expr", [
    "1 +",
    "+ 1",
    "+ 1 + 2",
    "1 + + 2",
    "1 * + 2",
    "1 + * 2",
    "1 2",
    "1 + 2 3",
    "( 1 ) ( 2 )",
    "( )",
    "1 + ( )",
    ") 1 + 2 (",
    "1 ) + ( 2",
    "( 1 ) ) + ( ( 2 )",
])
def test_structural_failures(expr):
    with pytest.raises(StructureError):
        build_expression(expr)


@pytest.mark.parametrize("expr, error", [
    ("1.2.3 + 1", TokenizeError),
    ("1 + ", TokenizeError),
    ("( 1 + 2", BraceMismatchError),
    ("1 + 2 )", BraceMismatchError),
])
def test_build_failures(expr, error):
    with pytest.raises(error):
        build_expression(expr)
    with pytest.raises(FormulaError):
        build_expression(expr)


def test_unclosed_group_is_structure_error():
    tokens = [Token(TokenKind.LEFT_BRACE), Token(TokenKind.NUMBER, 1.0)]
    with pytest.raises(StructureError, match="never closed"):
        FormulaBuilder(tokens).build()


def test_stray_closing_brace_with_balanced_counts():
    with pytest.raises(StructureError, match="Unexpected"):
        FormulaBuilder(tokenize("( 1 ) ) ( ( 2 )")).build()


def test_empty_token_list():
    with pytest.raises(StructureError):
        FormulaBuilder([]).build()


def test_nesting_limit():
    tokens = tokenize("( ( 1 ) )")
    with pytest.raises(NestingTooDeepError):
        FormulaBuilder(tokens, max_depth=1).build()
    assert evaluate(FormulaBuilder(tokens, max_depth=2).build()) == 1.0

    deep = "( " * 50 + "1" + " )" * 50
    with pytest.raises(NestingTooDeepError):
        build_expression(deep, CalcConfig(max_depth=10))
    assert evaluate(build_expression(deep)) == 1.0


def test_builder_is_reusable():
    builder = FormulaBuilder(tokenize("( 2 + 3 ) * 4"))
    assert evaluate(builder.build()) == 20.0
    assert evaluate(builder.build()) == 20.0


def test_debug_trace(caplog):
    caplog.set_level(logging.DEBUG, logger="fcalc.builder")
    build_expression("( 1 + 2 ) * 3")
    assert "Entering level 0" in caplog.text
    assert "Entering level 1" in caplog.text
    assert "Collapsing stack" in caplog.text


if __name__ == '__main__':
    unittest.main()
