import math

import pytest

from prot.ast import Binary, ExprStmt, Grouping, Literal, Print, Unary
from prot.errors import Diagnostics
from prot.interpreter import Interpreter, run_program
from prot.types import Token, TokenKind


def op(kind):
    return Token.of(kind)


def binary(left, kind, right):
    return Binary(Literal(left), op(kind), Literal(right))


@pytest.fixture
def interp():
    return Interpreter(diagnostics=Diagnostics())


def test_equality_of_numbers(interp):
    expr = binary(Token.number(8.7), TokenKind.EQUAL_EQUAL, Token.number(3.14))
    assert interp.evaluate(expr) == Token.boolean(False)


def test_unary_minus(interp):
    expr = Unary(op(TokenKind.MINUS), Literal(Token.number(3.14)))
    assert interp.evaluate(expr) == Token.number(-3.14)


@pytest.mark.parametrize('kind', [TokenKind.BANG, TokenKind.NOT])
def test_logical_not(interp, kind):
    assert interp.evaluate(Unary(op(kind), Literal(Token.string('')))) == Token.boolean(True)
    assert interp.evaluate(Unary(op(kind), Literal(Token.number(2.0)))) == Token.boolean(False)
    assert interp.evaluate(Unary(op(kind), Literal(Token.identifier('x')))) == Token.boolean(True)


@pytest.mark.parametrize('kind, a, b, expected', [
    (TokenKind.PLUS, 1.5, 2.0, 3.5),
    (TokenKind.MINUS, 1.5, 2.0, -0.5),
    (TokenKind.STAR, 1.5, 2.0, 3.0),
    (TokenKind.SLASH, 1.0, 4.0, 0.25),
    (TokenKind.PERCENT, 7.0, 4.0, 3.0),
    (TokenKind.PERCENT, -7.0, 4.0, -3.0),
    (TokenKind.CARET, 2.0, 0.5, math.sqrt(2.0)),
])
def test_arithmetic(interp, kind, a, b, expected):
    result = interp.evaluate(binary(Token.number(a), kind, Token.number(b)))
    assert result.kind is TokenKind.NUMBER
    assert result.value == pytest.approx(expected)


def test_division_by_zero_follows_ieee(interp):
    assert interp.evaluate(binary(Token.number(1.0), TokenKind.SLASH, Token.number(0.0))).value == math.inf
    assert interp.evaluate(binary(Token.number(-1.0), TokenKind.SLASH, Token.number(0.0))).value == -math.inf
    assert math.isnan(interp.evaluate(binary(Token.number(0.0), TokenKind.SLASH, Token.number(0.0))).value)
    assert math.isnan(interp.evaluate(binary(Token.number(1.0), TokenKind.PERCENT, Token.number(0.0))).value)
    assert math.isnan(interp.evaluate(binary(Token.number(-8.0), TokenKind.CARET, Token.number(0.5))).value)
    assert not interp.diagnostics.has_errors()


def test_string_concatenation(interp):
    expr = binary(Token.string('foo'), TokenKind.PLUS, Token.string('bar'))
    assert interp.evaluate(expr) == Token.string('foobar')


@pytest.mark.parametrize('kind, expected', [
    (TokenKind.GREATER, False),
    (TokenKind.GREATER_EQUAL, True),
    (TokenKind.LESS, False),
    (TokenKind.LESS_EQUAL, True),
])
def test_comparisons(interp, kind, expected):
    assert interp.evaluate(binary(Token.number(2.0), kind, Token.number(2.0))) == Token.boolean(expected)


def test_mixed_addition_fails_softly(interp, capsys):
    plus = Token(TokenKind.PLUS, '+', None, 4)
    expr = Binary(Literal(Token.number(1.0)), plus, Literal(Token.string('one')))
    assert interp.evaluate(expr) == Token.none()
    assert interp.diagnostics.has_errors('evaluation')
    assert "Evaluation error (line 4): unsupported '+' for number and string" in capsys.readouterr().err


@pytest.mark.parametrize('kind', [
    TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT,
    TokenKind.CARET, TokenKind.GREATER, TokenKind.LESS_EQUAL,
])
def test_numeric_operators_reject_strings(interp, kind, capsys):
    assert interp.evaluate(binary(Token.string('a'), kind, Token.number(1.0))) == Token.none()
    assert 'expected number, got string' in capsys.readouterr().err


def test_unary_minus_rejects_bool(interp, capsys):
    assert interp.evaluate(Unary(op(TokenKind.MINUS), Literal(Token.boolean(True)))) == Token.none()
    assert "unary '-': expected number, got bool" in capsys.readouterr().err


def test_not_rejects_eof_sentinel(interp):
    assert interp.evaluate(Unary(op(TokenKind.NOT), Literal(Token.of(TokenKind.EOF)))) == Token.none()
    assert interp.diagnostics.has_errors('evaluation')


def test_sentinel_propagates_through_enclosing_expression(interp):
    # (1 + "x") * 2: the inner failure makes the outer multiplication fail too
    inner = binary(Token.number(1.0), TokenKind.PLUS, Token.string('x'))
    outer = Binary(inner, op(TokenKind.STAR), Literal(Token.number(2.0)))
    assert interp.evaluate(outer) == Token.none()
    assert len(interp.diagnostics.records) == 2


def test_tag_matched_equality(interp):
    hi, bye = Token.string('hi'), Token.string('bye')
    assert interp.evaluate(binary(hi, TokenKind.EQUAL_EQUAL, bye)) == Token.boolean(False)
    assert interp.evaluate(binary(hi, TokenKind.BANG_EQUAL, bye)) == Token.boolean(True)
    assert interp.evaluate(binary(Token.number(1.0), TokenKind.EQUAL_EQUAL, Token.boolean(True))) == Token.boolean(False)
    assert interp.evaluate(binary(Token.none(), TokenKind.EQUAL_EQUAL, Token.none())) == Token.boolean(True)


def test_cascade_equality_option():
    interp = Interpreter(diagnostics=Diagnostics(), cascade_equality=True)
    assert interp.evaluate(binary(Token.string('hi'), TokenKind.EQUAL_EQUAL, Token.string('bye'))) == Token.boolean(True)
    assert interp.evaluate(binary(Token.number(1.0), TokenKind.EQUAL_EQUAL, Token.boolean(True))) == Token.boolean(True)
    assert interp.evaluate(binary(Token.number(1.0), TokenKind.EQUAL_EQUAL, Token.number(2.0))) == Token.boolean(False)


def test_grouping_yields_inner_value(interp):
    expr = Grouping(op(TokenKind.LEFT_PAREN), Literal(Token.number(3.0)), op(TokenKind.RIGHT_PAREN))
    assert interp.evaluate(expr) == Token.number(3.0)


def test_null_groupings_option():
    interp = Interpreter(diagnostics=Diagnostics(), null_groupings=True)
    expr = Grouping(op(TokenKind.LEFT_PAREN), Literal(Token.number(3.0)), op(TokenKind.RIGHT_PAREN))
    assert interp.evaluate(expr) == Token.none()


def test_evaluation_does_not_mutate_tree(interp):
    expr = Unary(op(TokenKind.MINUS), binary(Token.number(2.0), TokenKind.CARET, Token.number(3.0)))
    before = repr(expr)
    assert interp.evaluate(expr) == interp.evaluate(expr) == Token.number(-8.0)
    assert repr(expr) == before


def test_print_string(interp, capsys):
    interp.execute(Print(Literal(Token.string('hi'))))
    assert capsys.readouterr().out == 'hi\n'


@pytest.mark.parametrize('token, text', [
    (Token.number(3.0), '3'),
    (Token.number(2.5), '2.5'),
    (Token.number(-0.125), '-0.125'),
    (Token.boolean(True), 'true'),
    (Token.none(), 'none'),
])
def test_print_renders_values(interp, capsys, token, text):
    interp.execute(Print(Literal(token)))
    assert capsys.readouterr().out == text + '\n'


def test_print_identifier_reports_instead_of_printing(interp, capsys):
    interp.execute(Print(Literal(Token(TokenKind.IDENTIFIER, 'x', 'x', 2))))
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'Evaluation error (line 2): cannot print value: cannot convert identifier to string' in captured.err


def test_expression_statement_prints_nothing(interp, capsys):
    interp.execute(ExprStmt(binary(Token.number(1.0), TokenKind.PLUS, Token.number(1.0))))
    assert capsys.readouterr().out == ''


def test_run_program(capsys):
    assert run_program('print "a" + "b"\nprint 2 * (3 + 4)\n')
    assert capsys.readouterr().out == 'ab\n14\n'


def test_run_program_empty_source(capsys):
    assert run_program('# nothing here\n')
    assert capsys.readouterr().out == ''


def test_run_program_stops_on_parse_error(capsys):
    diagnostics = Diagnostics()
    assert not run_program('print 1\nprint (2\n', diagnostics=diagnostics)
    captured = capsys.readouterr()
    assert captured.out == ''
    assert diagnostics.has_errors('parsing')
    assert not diagnostics.has_errors('evaluation')


def test_run_program_forwards_options(capsys):
    assert run_program('print (1)\nprint "a" == "b"\n', null_groupings=True, cascade_equality=True)
    assert capsys.readouterr().out == 'none\ntrue\n'


def test_debug_trace(tmp_path, capsys):
    debug_file = tmp_path / 'trace.txt'
    assert run_program('print 1 + 2\n', debug_level=3, debug_file=str(debug_file))
    assert capsys.readouterr().out == '3\n'
    trace = debug_file.read_text(encoding='utf-8')
    assert 'tokenize: 5 tokens' in trace
    assert 'parse: 1 statements' in trace
    assert '"type": "Print"' in trace
    assert 'NUMBER(1.0) + NUMBER(2.0) -> NUMBER(3.0)' in trace


def test_no_debug_file_without_debug_level(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    run_program('print 1\n')
    assert not (tmp_path / 'debug.txt').exists()


@pytest.mark.parametrize('a, b, expected', [
    (0.0, -1.0, math.inf),
    (-0.0, -1.0, -math.inf),
    (-0.0, -2.0, math.inf),
    (0.0, -0.5, math.inf),
    (-10.0, 309.0, -math.inf),
    (-10.0, 310.0, math.inf),
    (10.0, 309.0, math.inf),
])
def test_power_poles_and_overflow_follow_ieee(interp, a, b, expected):
    result = interp.evaluate(binary(Token.number(a), TokenKind.CARET, Token.number(b)))
    assert result.value == expected
    assert not interp.diagnostics.has_errors()


def test_long_operator_chain(capsys):
    assert run_program('print ' + ' + '.join(['1'] * 5000) + '\n')
    assert capsys.readouterr().out == '5000\n'


def test_deeply_stacked_unary_minus(capsys):
    assert run_program('print ' + '- ' * 2000 + '1\n')
    assert run_program('print ' + '- ' * 2001 + '1\n')
    assert capsys.readouterr().out == '1\n-1\n'


def test_failure_at_root_of_deep_tree(interp, capsys):
    expr = Literal(Token.number(0.0))
    for _ in range(3000):
        expr = Binary(expr, op(TokenKind.PLUS), Literal(Token.number(1.0)))
    expr = Binary(expr, op(TokenKind.STAR), Literal(Token.string('x')))
    assert interp.evaluate(expr) == Token.none()
    assert interp.evaluate(expr.left) == Token.number(3000.0)
    assert "'*': expected number, got string" in capsys.readouterr().err


def test_no_tree_dump_below_level_two(tmp_path, monkeypatch):
    def fail_dump(node):
        raise AssertionError('tree dumped with tracing off')

    monkeypatch.setattr('prot.interpreter.ast_to_obj', fail_dump)
    debug_file = tmp_path / 'trace.txt'
    assert run_program('print 1\n')
    assert run_program('print 1\n', debug_level=1, debug_file=str(debug_file))
    assert 'parse: 1 statements' in debug_file.read_text(encoding='utf-8')
