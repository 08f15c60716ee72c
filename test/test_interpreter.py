"""
Evaluator tests for Once
Covers every expression form, environment threading and the
write-once binding discipline
"""

import pytest
from fractions import Fraction

from result import is_ok, is_err, ok_or, err_or
from environment import (
  EMPTY_ENV,
  UNBOUND,
  make_env,
  make_number,
  env_get,
  env_is_defined,
  env_to_dict,
  env_names
)
from expressions import (
  make_literal,
  make_binary_op,
  make_lookup,
  make_define,
  make_assign,
  make_remove
)
from interpreter import (
  eval_ast,
  eval_form,
  eval_program,
  create_interpreter,
  create_debug_interpreter
)


def value_of(outcome):
  return ok_or(outcome)[0]


def env_of(outcome):
  return outcome['payload'][1]


def message_of(outcome):
  return err_or(outcome)[0]


@pytest.fixture
def env_a5():
  """a bound to 5"""
  return make_env([("a", make_number(5))])


@pytest.fixture
def env_a_unbound():
  """a declared without a value"""
  return make_env([("a", UNBOUND)])


class TestLiterals:
  """Test literal evaluation"""

  def test_literal_returns_number_and_same_env(self, env_a5):
    outcome = eval_ast(make_literal(42), env_a5)
    assert is_ok(outcome)
    assert value_of(outcome) == 42
    assert env_of(outcome) is env_a5

  def test_fraction_literal(self, empty_env):
    outcome = eval_ast(make_literal(Fraction(1, 3)), empty_env)
    assert value_of(outcome) == Fraction(1, 3)

  @pytest.mark.parametrize("value", [1.5, "ok", True, None])
  def test_non_exact_literal_is_not_a_number(self, env_a5, value):
    outcome = eval_ast(make_literal(value), env_a5)
    assert is_err(outcome)
    assert message_of(outcome) == "not a number"
    assert env_of(outcome) is env_a5

  def test_float_literal_operand_matches_literal_rejection(self, empty_env):
    direct = eval_ast(make_literal(1.5), empty_env)
    nested = eval_ast(make_binary_op("add", make_literal(1.5), make_literal(1)), empty_env)
    defined = eval_ast(make_define("x", make_literal(1.5)), empty_env)
    assert message_of(direct) == message_of(nested) == message_of(defined) == "not a number"
    assert env_of(defined) is empty_env


class TestBinaryOperations:
  """Test arithmetic and left-to-right sequencing"""

  @pytest.mark.parametrize("op,left,right,expected", [
    ("add", 2, 3, 5),
    ("sub", 2, 3, -1),
    ("mult", 4, 3, 12),
    ("div", 6, 3, 2),
    ("div", 1, 3, Fraction(1, 3)),
  ])
  def test_arithmetic(self, empty_env, op, left, right, expected):
    outcome = eval_ast(make_binary_op(op, make_literal(left), make_literal(right)), empty_env)
    assert is_ok(outcome)
    assert value_of(outcome) == expected

  def test_exact_quotient_is_int_when_whole(self, empty_env):
    outcome = eval_ast(make_binary_op("div", make_literal(6), make_literal(3)), empty_env)
    assert isinstance(value_of(outcome), int)

  def test_division_by_zero_is_reported(self, env_a5):
    outcome = eval_ast(make_binary_op("div", make_literal(7), make_literal(0)), env_a5)
    assert is_err(outcome)
    assert message_of(outcome) == "division by zero"
    assert env_of(outcome) == env_a5

  def test_division_by_zero_keeps_operand_effects(self, empty_env):
    expr = make_binary_op("div", make_define("x", make_literal(4)), make_literal(0))
    outcome = eval_ast(expr, empty_env)
    assert message_of(outcome) == "division by zero"
    assert env_to_dict(env_of(outcome)) == {"x": 4}

  def test_left_effects_visible_to_right(self, empty_env):
    expr = make_binary_op("add", make_define("x", make_literal(1)), make_lookup("x"))
    outcome = eval_ast(expr, empty_env)
    assert is_ok(outcome)
    assert value_of(outcome) == 2
    assert env_to_dict(env_of(outcome)) == {"x": 1}

  def test_left_failure_short_circuits(self, empty_env):
    expr = make_binary_op("add", make_lookup("missing"), make_define("y", make_literal(1)))
    outcome = eval_ast(expr, empty_env)
    assert message_of(outcome) == "not defined"
    assert not env_is_defined(env_of(outcome), "y")

  def test_right_failure_keeps_left_effects(self, empty_env):
    expr = make_binary_op("add", make_define("x", make_literal(1)), make_lookup("nope"))
    outcome = eval_ast(expr, empty_env)
    assert message_of(outcome) == "not defined"
    assert env_to_dict(env_of(outcome)) == {"x": 1}

  def test_unknown_operator(self, env_a5):
    outcome = eval_ast(make_binary_op("pow", make_literal(2), make_literal(3)), env_a5)
    assert message_of(outcome) == "unknown expression"
    assert env_of(outcome) is env_a5

  def test_status_value_is_not_a_number(self, empty_env):
    expr = make_binary_op("add", make_define("x"), make_literal(1))
    outcome = eval_ast(expr, empty_env)
    assert message_of(outcome) == "not a number"
    assert env_names(env_of(outcome)) == ["x"]


class TestLookup:
  """Test the three lookup failure kinds"""

  def test_bound_identifier(self, env_a5):
    outcome = eval_ast(make_lookup("a"), env_a5)
    assert value_of(outcome) == 5

  @pytest.mark.parametrize("name", ["", "1a", "-a", "a b", "a.b"])
  def test_invalid_identifier(self, env_a5, name):
    outcome = eval_ast(make_lookup(name), env_a5)
    assert message_of(outcome) == "invalid identifier"

  def test_not_defined(self, empty_env):
    assert message_of(eval_ast(make_lookup("a"), empty_env)) == "not defined"

  def test_unbound_is_undefined(self, env_a_unbound):
    assert message_of(eval_ast(make_lookup("a"), env_a_unbound)) == "undefined"

  def test_validation_precedes_presence(self):
    # An invalid name can be stored by define but never read back
    outcome = eval_ast(make_define("9lives", make_literal(9)), EMPTY_ENV)
    assert is_ok(outcome)
    lookup = eval_ast(make_lookup("9lives"), env_of(outcome))
    assert message_of(lookup) == "invalid identifier"


class TestDefine:
  """Test define with and without an initializer"""

  def test_define_without_initializer(self, empty_env):
    outcome = eval_ast(make_define("a"), empty_env)
    assert value_of(outcome) == "ok"
    assert env_get(env_of(outcome), "a") == UNBOUND

  def test_define_with_initializer(self, env_a5):
    outcome = eval_ast(make_define("b", make_binary_op("add", make_lookup("a"), make_literal(1))), env_a5)
    assert value_of(outcome) == 6
    assert env_names(env_of(outcome)) == ["b", "a"]

  @pytest.mark.parametrize("init", [None, make_literal(1)])
  def test_redefine_bound_is_rejected(self, env_a5, init):
    outcome = eval_ast(make_define("a", init), env_a5)
    assert message_of(outcome) == "already defined"
    assert env_of(outcome) is env_a5

  @pytest.mark.parametrize("init", [None, make_literal(1)])
  def test_redefine_unbound_is_rejected(self, env_a_unbound, init):
    outcome = eval_ast(make_define("a", init), env_a_unbound)
    assert message_of(outcome) == "already defined"
    assert env_of(outcome) is env_a_unbound

  def test_initializer_failure_propagates(self, empty_env):
    outcome = eval_ast(make_define("a", make_lookup("zzz")), empty_env)
    assert message_of(outcome) == "not defined"
    assert not env_is_defined(env_of(outcome), "a")

  def test_initializer_defining_same_name_is_rejected(self, empty_env):
    outcome = eval_ast(make_define("a", make_define("a", make_literal(1))), empty_env)
    assert message_of(outcome) == "already defined"
    assert env_names(env_of(outcome)) == ["a"]

  def test_original_env_untouched(self, env_a5):
    eval_ast(make_define("b", make_literal(2)), env_a5)
    assert env_names(env_a5) == ["a"]


class TestAssign:
  """Test the one-time materialization of unbound slots"""

  def test_assign_unbound(self, env_a_unbound):
    outcome = eval_ast(make_assign("a", make_literal(5)), env_a_unbound)
    assert value_of(outcome) == 5
    assert env_to_dict(env_of(outcome)) == {"a": 5}
    assert env_get(env_a_unbound, "a") == UNBOUND

  def test_assign_twice_fails(self, env_a_unbound):
    first = eval_ast(make_assign("a", make_literal(5)), env_a_unbound)
    second = eval_ast(make_assign("a", make_literal(6)), env_of(first))
    assert message_of(second) == "already has value"
    assert env_to_dict(env_of(second)) == {"a": 5}

  def test_assign_missing(self, empty_env):
    outcome = eval_ast(make_assign("a", make_literal(5)), empty_env)
    assert message_of(outcome) == "id not defined"

  def test_assign_checks_before_evaluating(self, env_a5):
    outcome = eval_ast(make_assign("a", make_define("b", make_literal(1))), env_a5)
    assert message_of(outcome) == "already has value"
    assert not env_is_defined(env_of(outcome), "b")

  def test_assign_expression_failure_propagates(self, env_a_unbound):
    expr = make_assign("a", make_binary_op("div", make_literal(1), make_literal(0)))
    outcome = eval_ast(expr, env_a_unbound)
    assert message_of(outcome) == "division by zero"
    assert env_get(env_of(outcome), "a") == UNBOUND

  def test_expression_filling_slot_is_rejected(self, env_a_unbound):
    expr = make_assign("a", make_assign("a", make_literal(1)))
    outcome = eval_ast(expr, env_a_unbound)
    assert message_of(outcome) == "already has value"
    assert env_to_dict(env_of(outcome)) == {"a": 1}

  def test_expression_removing_slot_is_rejected(self, env_a_unbound):
    outcome = eval_ast(make_assign("a", make_remove("a")), env_a_unbound)
    assert message_of(outcome) == "id not defined"
    assert env_of(outcome) == EMPTY_ENV


class TestRemove:
  """Test binding removal"""

  def test_remove_present(self, env_a5):
    outcome = eval_ast(make_remove("a"), env_a5)
    assert value_of(outcome) == "ok"
    assert env_of(outcome) == EMPTY_ENV

  def test_lookup_after_remove(self, env_a5):
    removed = env_of(eval_ast(make_remove("a"), env_a5))
    assert message_of(eval_ast(make_lookup("a"), removed)) == "not defined"
    add = make_binary_op("add", make_lookup("a"), make_literal(1))
    assert message_of(eval_ast(add, removed)) == "not defined"

  def test_remove_absent(self, env_a5):
    outcome = eval_ast(make_remove("b"), env_a5)
    assert message_of(outcome) == "identifier not defined, ignoring"
    assert env_of(outcome) is env_a5

  def test_remove_unbound(self, env_a_unbound):
    outcome = eval_ast(make_remove("a"), env_a_unbound)
    assert is_ok(outcome)
    assert env_of(outcome) == EMPTY_ENV


class TestUnknownExpressions:
  """Test the structural catch-all"""

  @pytest.mark.parametrize("node", [
    {'type': 'LOOP', 'value': None},
    {},
    None,
    42,
  ])
  def test_unknown(self, env_a5, node):
    outcome = eval_ast(node, env_a5)
    assert message_of(outcome) == "unknown expression"
    assert env_of(outcome) is env_a5


class TestEndToEnd:
  """The reference session, step by step"""

  def test_reference_session(self, empty_env):
    step1 = eval_ast(make_define("a"), empty_env)
    assert value_of(step1) == "ok"
    assert env_of(step1) == make_env([("a", UNBOUND)])

    step2 = eval_ast(make_lookup("a"), env_of(step1))
    assert message_of(step2) == "undefined"

    step3 = eval_ast(make_assign("a", make_literal(5)), env_of(step2))
    assert value_of(step3) == 5
    assert env_to_dict(env_of(step3)) == {"a": 5}

    plus = make_binary_op("add", make_lookup("a"), make_literal(1))
    step4 = eval_ast(make_define("b", plus), env_of(step3))
    assert value_of(step4) == 6
    assert env_of(step4) == make_env([("b", make_number(6)), ("a", make_number(5))])

    step5 = eval_ast(make_remove("b"), env_of(step4))
    assert value_of(step5) == "ok"
    assert env_to_dict(env_of(step5)) == {"a": 5}

    step6 = eval_ast(make_remove("b"), env_of(step5))
    assert message_of(step6) == "identifier not defined, ignoring"
    assert env_of(step6) == env_of(step5)

  def test_eval_program_threads_env_through_failures(self):
    program = [
      make_define("a"),
      make_lookup("a"),
      make_assign("a", make_literal(5)),
      make_define("b", make_binary_op("add", make_lookup("a"), make_literal(1))),
      make_remove("b"),
      make_remove("b"),
    ]
    outcomes, final_env = eval_program(program)
    assert [is_ok(o) for o in outcomes] == [True, False, True, True, True, False]
    assert env_to_dict(final_env) == {"a": 5}

  def test_eval_form(self, empty_env):
    outcome = eval_form(["define", "b", ["+", 2, ["*", 3, 4]]], empty_env)
    assert value_of(outcome) == 14

  def test_eval_form_usage_error(self, env_a5):
    outcome = eval_form(["assign", "a"], env_a5)
    assert message_of(outcome) == "usage: (assign <id> <expr>)"
    assert env_of(outcome) is env_a5


class TestInterpreterFactory:
  """Test the interpreter factory"""

  def test_evaluate_defaults_to_empty_env(self):
    interpreter = create_interpreter()
    outcome = interpreter.evaluate(make_define("x", make_literal(3)))
    assert env_to_dict(env_of(outcome)) == {"x": 3}

  def test_run(self):
    interpreter = create_interpreter()
    outcomes, env = interpreter.run([make_define("x"), make_assign("x", make_literal(2))])
    assert len(outcomes) == 2
    assert env_to_dict(env) == {"x": 2}

  def test_debug_traces(self, capsys):
    interpreter = create_debug_interpreter()
    interpreter.evaluate_form(["define", "x", 1])
    captured = capsys.readouterr()
    assert "Evaluating: DEFINE" in captured.out
    assert "Evaluating: LITERAL" in captured.out

  def test_quiet_by_default(self, capsys):
    create_interpreter().evaluate_form(["define", "x", 1])
    assert capsys.readouterr().out == ""
