"""
Expression nodes for Once
Node constructors plus a decoder from pre-structured forms
(nested lists, numbers and strings) into nodes
"""

from typing import Any, Dict, Optional

from result import make_ok, make_err, is_err
from operators import OPERATOR_ALIASES, is_numeric
from error_handling import (
  DEFINE_USAGE,
  ASSIGN_USAGE,
  REMOVE_USAGE,
  UNKNOWN_EXPRESSION,
  operator_usage
)


LITERAL = "LITERAL"
BINARY_OP = "BINARY_OP"
LOOKUP = "LOOKUP"
DEFINE = "DEFINE"
ASSIGN = "ASSIGN"
REMOVE = "REMOVE"


# ============================================================================
# NODE CONSTRUCTORS (Immutable Dictionaries)
# ============================================================================

def make_literal(number: Any) -> Dict:
  return {'type': LITERAL, 'value': number}


def make_binary_op(op: str, left: Dict, right: Dict) -> Dict:
  return {
      'type': BINARY_OP,
      'value': {'op': op, 'left': left, 'right': right}
  }


def make_lookup(name: str) -> Dict:
  return {'type': LOOKUP, 'value': name}


def make_define(name: str, init: Optional[Dict] = None) -> Dict:
  """Define name, optionally with an initializer expression"""
  return {
      'type': DEFINE,
      'value': {'name': name, 'init': init}
  }


def make_assign(name: str, expr: Dict) -> Dict:
  return {
      'type': ASSIGN,
      'value': {'name': name, 'expr': expr}
  }


def make_remove(name: str) -> Dict:
  return {'type': REMOVE, 'value': name}


# ============================================================================
# FORM DECODING
# ============================================================================

def expression_from_form(form: Any) -> Dict:
  """
  Decode a form into an expression node

  Returns Ok(node) or Err(message). Arity mistakes in binding and
  operator forms are usage errors; anything unrecognised is an
  unknown expression.

  Examples:
    expression_from_form(5) -> Ok(Literal 5)
    expression_from_form("x") -> Ok(Lookup x)
    expression_from_form(["define", "b", ["+", "a", 1]]) -> Ok(Define b ...)
    expression_from_form(["remove"]) -> Err("usage: (remove <id>)")
  """
  if is_numeric(form):
    return make_ok(make_literal(form))
  if isinstance(form, str):
    return make_ok(make_lookup(form))
  if not isinstance(form, list) or not form or not isinstance(form[0], str):
    return make_err(UNKNOWN_EXPRESSION)

  head, args = form[0], form[1:]

  if head == "define":
    return define_from_form(args)
  if head == "assign":
    return assign_from_form(args)
  if head == "remove":
    if len(args) != 1 or not isinstance(args[0], str):
      return make_err(REMOVE_USAGE)
    return make_ok(make_remove(args[0]))
  if head in OPERATOR_ALIASES:
    return binary_op_from_form(head, args)

  return make_err(UNKNOWN_EXPRESSION)


def define_from_form(args: list) -> Dict:
  if len(args) not in (1, 2) or not isinstance(args[0], str):
    return make_err(DEFINE_USAGE)
  if len(args) == 1:
    return make_ok(make_define(args[0]))

  init = expression_from_form(args[1])
  if is_err(init):
    return init
  return make_ok(make_define(args[0], init['payload']))


def assign_from_form(args: list) -> Dict:
  if len(args) != 2 or not isinstance(args[0], str):
    return make_err(ASSIGN_USAGE)

  expr = expression_from_form(args[1])
  if is_err(expr):
    return expr
  return make_ok(make_assign(args[0], expr['payload']))


def binary_op_from_form(head: str, args: list) -> Dict:
  if len(args) != 2:
    return make_err(operator_usage(head))

  left = expression_from_form(args[0])
  if is_err(left):
    return left
  right = expression_from_form(args[1])
  if is_err(right):
    return right

  return make_ok(make_binary_op(OPERATOR_ALIASES[head], left['payload'], right['payload']))
