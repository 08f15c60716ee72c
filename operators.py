"""
Binary arithmetic operators for Once
Operators take two raw numbers and return a Result, never raise
"""

from typing import Any, Callable, Dict
from fractions import Fraction
from numbers import Rational
import operator

from result import make_ok, make_err
from error_handling import DIVISION_BY_ZERO, NOT_A_NUMBER, UNKNOWN_EXPRESSION


# ============================================================================
# NUMBERS
# ============================================================================

def is_numeric(x: Any) -> bool:
  """Exact numbers only; bool is an int subclass but never a number here"""
  return isinstance(x, Rational) and not isinstance(x, bool)


def normalize_number(n: Any) -> Any:
  """Collapse whole Fractions back to int so 6/3 reads as 2"""
  if isinstance(n, Fraction) and n.denominator == 1:
    return n.numerator
  return n


# ============================================================================
# OPERATION FACTORIES
# ============================================================================

def binary_arithmetic_op(op: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Dict]:
  """
  Factory for total arithmetic operations

  Examples:
    once_add = binary_arithmetic_op(operator.add)
    once_add(1, 2) -> Ok(3)
  """
  def arithmetic(x: Any, y: Any) -> Dict:
    return make_ok(normalize_number(op(x, y)))

  return arithmetic


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

once_add = binary_arithmetic_op(operator.add)
once_sub = binary_arithmetic_op(operator.sub)
once_mult = binary_arithmetic_op(operator.mul)


def once_div(x: Any, y: Any) -> Dict:
  """Exact division; a zero divisor is a reported failure"""
  if y == 0:
    return make_err(DIVISION_BY_ZERO)
  return make_ok(normalize_number(Fraction(x) / Fraction(y)))


BINARY_OPERATORS = {
    'add': once_add,
    'sub': once_sub,
    'mult': once_mult,
    'div': once_div,
}

# Spellings accepted by the form decoder
OPERATOR_ALIASES = {
    '+': 'add',
    '-': 'sub',
    '*': 'mult',
    '/': 'div',
    'add': 'add',
    'sub': 'sub',
    'mult': 'mult',
    'div': 'div',
}


def apply_binary_op(op: str, x: Any, y: Any) -> Dict:
  op_func = BINARY_OPERATORS.get(op)
  if op_func is None:
    return make_err(UNKNOWN_EXPRESSION)
  if not (is_numeric(x) and is_numeric(y)):
    return make_err(NOT_A_NUMBER)
  return op_func(x, y)
