import math

import pytest

from billiards.errors import ExpressionError
from billiards.expr import parse_scalar_expr, tokenize


@pytest.mark.parametrize('text,expected', [
    ('pi/4', math.pi / 4),
    ('PI/4', math.pi / 4),
    ('Pi / 3', math.pi / 3),
    ('sqrt(2)/5', math.sqrt(2) / 5),
    ('1.5', 1.5),
    ('.5', 0.5),
    ('2e-1', 0.2),
    ('-1/2', -0.5),
    ('--3', 3.0),
    ('+2', 2.0),
    ('1 + 2 * 3', 7.0),
    ('(1 + 2) * 3', 9.0),
    ('8 / 4 / 2', 1.0),
    ('5 - 3 - 1', 1.0),
    ('2 * -3', -6.0),
    ('sin(pi/2)', 1.0),
    ('cos(0)', 1.0),
    ('sqrt(sqrt(16))', 2.0),
    ('  pi/6  ', math.pi / 6),
])
def test_values(text, expected):
    assert parse_scalar_expr(text) == pytest.approx(expected)


@pytest.mark.parametrize('text', ['inf', 'INF', 'infty', 'Infinity', '∞', '  inf '])
def test_infinity_when_allowed(text):
    assert parse_scalar_expr(text, allow_infinity=True) == math.inf


def test_infinity_rejected_by_default():
    with pytest.raises(ExpressionError):
        parse_scalar_expr('inf')


@pytest.mark.parametrize('text', [
    '',
    '   ',
    '1/0',
    'sqrt(-1)',
    '2 +',
    '(1 + 2',
    '1 + 2)',
    'sqrt 2',
    'tan(1)',
    'e',
    '2pi',
    '__import__("os")',
    '1; 2',
    '3 ** 2',
    '1e400',
    '1e200 * 1e200',
])
def test_errors(text):
    with pytest.raises(ExpressionError):
        parse_scalar_expr(text)


def test_error_reports_position():
    with pytest.raises(ExpressionError) as exc:
        parse_scalar_expr('1 + $')
    assert exc.value.position == 4
    assert 'position 4' in str(exc.value)


def test_none_is_empty():
    with pytest.raises(ExpressionError):
        parse_scalar_expr(None)


def test_tokenize():
    kinds = [t.kind for t in tokenize('sqrt(2)/5')]
    assert kinds == ['name', 'op', 'number', 'op', 'op', 'number', 'end']
