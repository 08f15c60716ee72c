"""
Once Interpreter - Pure Functional Style
Tree-walking evaluator with write-once bindings.
Every evaluation returns an outcome, Ok((value, env)) or Err((message, env));
nothing is raised and no environment is mutated in place.
"""

from typing import Any, Dict, List, Optional, Tuple

from result import (
  make_outcome_ok,
  make_outcome_err,
  is_err,
  unpack_outcome
)
from environment import (
  EMPTY_ENV,
  UNBOUND,
  make_number,
  is_unbound,
  env_is_defined,
  env_get,
  env_extend,
  env_update,
  env_remove
)
from identifiers import is_valid_identifier
from operators import BINARY_OPERATORS, apply_binary_op, is_numeric
from expressions import (
  LITERAL,
  BINARY_OP,
  LOOKUP,
  DEFINE,
  ASSIGN,
  REMOVE,
  expression_from_form
)
from error_handling import (
  INVALID_IDENTIFIER,
  NOT_DEFINED,
  UNDEFINED,
  ALREADY_DEFINED,
  ID_NOT_DEFINED,
  ALREADY_HAS_VALUE,
  REMOVE_NOT_DEFINED,
  NOT_A_NUMBER,
  UNKNOWN_EXPRESSION
)


STATUS_OK = "ok"


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: Any, env: Dict, debug: bool = False) -> Dict:
  """
  Evaluate an expression node against env and return its outcome.
  This is a pure function that threads the environment through evaluation.
  """
  node_type = ast_node.get('type') if isinstance(ast_node, dict) else None

  if debug:
    print(f"Evaluating: {node_type}")

  if node_type == LITERAL:
    return eval_literal(ast_node, env, debug)
  elif node_type == BINARY_OP:
    return eval_binary_op(ast_node, env, debug)
  elif node_type == LOOKUP:
    return eval_lookup(ast_node, env, debug)
  elif node_type == DEFINE:
    return eval_define(ast_node, env, debug)
  elif node_type == ASSIGN:
    return eval_assign(ast_node, env, debug)
  elif node_type == REMOVE:
    return eval_remove(ast_node, env, debug)
  else:
    if debug:
      print(f"Unknown node type: {node_type}")
    return make_outcome_err(UNKNOWN_EXPRESSION, env)


def eval_literal(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate number literal"""
  value = ast_node['value']
  if not is_numeric(value):
    return make_outcome_err(NOT_A_NUMBER, env)
  return make_outcome_ok(value, env)


def eval_binary_op(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate binary operation, left operand first"""
  value_dict = ast_node['value']
  op = value_dict['op']

  if op not in BINARY_OPERATORS:
    return make_outcome_err(UNKNOWN_EXPRESSION, env)

  left = eval_ast(value_dict['left'], env, debug)
  if is_err(left):
    return left
  left_val, env = left['payload']

  # Right operand sees the left operand's bindings
  right = eval_ast(value_dict['right'], env, debug)
  if is_err(right):
    return right
  right_val, env = right['payload']

  applied = apply_binary_op(op, left_val, right_val)
  if is_err(applied):
    if debug:
      print(f"  {op} failed: {applied['payload']}")
    return make_outcome_err(applied['payload'], env)
  return make_outcome_ok(applied['payload'], env)


def eval_lookup(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate identifier by looking it up in the environment"""
  name = ast_node['value']

  if not is_valid_identifier(name):
    return make_outcome_err(INVALID_IDENTIFIER, env)
  if not env_is_defined(env, name):
    return make_outcome_err(NOT_DEFINED, env)

  value = env_get(env, name)
  if is_unbound(value):
    return make_outcome_err(UNDEFINED, env)
  return make_outcome_ok(value['value'], env)


def eval_define(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate define: create an Unbound slot, or a bound one from the initializer"""
  value_dict = ast_node['value']
  name = value_dict['name']
  init = value_dict.get('init')

  if env_is_defined(env, name):
    return make_outcome_err(ALREADY_DEFINED, env)

  if init is None:
    if debug:
      print(f"  define {name} (unbound)")
    return make_outcome_ok(STATUS_OK, env_extend(env, name, UNBOUND))

  initialized = eval_ast(init, env, debug)
  if is_err(initialized):
    return initialized
  value, env = initialized['payload']

  # The initializer itself may have defined name
  if env_is_defined(env, name):
    return make_outcome_err(ALREADY_DEFINED, env)
  if not is_numeric(value):
    return make_outcome_err(NOT_A_NUMBER, env)

  if debug:
    print(f"  define {name} = {value}")
  return make_outcome_ok(value, env_extend(env, name, make_number(value)))


def eval_assign(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate assign: fill a declared Unbound slot exactly once"""
  value_dict = ast_node['value']
  name = value_dict['name']

  if not env_is_defined(env, name):
    return make_outcome_err(ID_NOT_DEFINED, env)
  if not is_unbound(env_get(env, name)):
    return make_outcome_err(ALREADY_HAS_VALUE, env)

  evaluated = eval_ast(value_dict['expr'], env, debug)
  if is_err(evaluated):
    return evaluated
  value, env = evaluated['payload']

  # The expression may have removed or filled the slot
  if not env_is_defined(env, name):
    return make_outcome_err(ID_NOT_DEFINED, env)
  if not is_unbound(env_get(env, name)):
    return make_outcome_err(ALREADY_HAS_VALUE, env)
  if not is_numeric(value):
    return make_outcome_err(NOT_A_NUMBER, env)

  if debug:
    print(f"  assign {name} = {value}")
  return make_outcome_ok(value, env_update(env, name, make_number(value)))


def eval_remove(ast_node: Dict, env: Dict, debug: bool = False) -> Dict:
  """Evaluate remove: delete an existing binding"""
  name = ast_node['value']

  if not env_is_defined(env, name):
    return make_outcome_err(REMOVE_NOT_DEFINED, env)

  if debug:
    print(f"  remove {name}")
  return make_outcome_ok(STATUS_OK, env_remove(env, name))


def eval_form(form: Any, env: Dict, debug: bool = False) -> Dict:
  """Decode a form and evaluate it; decoding failures keep env unchanged"""
  decoded = expression_from_form(form)
  if is_err(decoded):
    return make_outcome_err(decoded['payload'], env)
  return eval_ast(decoded['payload'], env, debug)


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(ast_nodes: List[Dict], env: Optional[Dict] = None,
                 debug: bool = False) -> Tuple[List[Dict], Dict]:
  """
  Evaluate a sequence of expressions and return (outcomes, final_env).
  Each outcome's environment, Ok or Err, feeds the next evaluation.
  """
  if env is None:
    env = EMPTY_ENV
  outcomes = []

  for ast_node in ast_nodes:
    outcome = eval_ast(ast_node, env, debug)
    _, _, env = unpack_outcome(outcome)
    outcomes.append(outcome)

  return outcomes, env


# ============================================================================
# FACTORY FUNCTIONS (for main.py and sessions)
# ============================================================================

def create_interpreter(debug: bool = False):
  """Factory function returning an interpreter"""
  def evaluate(ast_node, env=None):
    return eval_ast(ast_node, EMPTY_ENV if env is None else env, debug)

  def evaluate_form(form, env=None):
    return eval_form(form, EMPTY_ENV if env is None else env, debug)

  def run(ast_nodes, env=None):
    return eval_program(ast_nodes, env, debug)

  return type('Interpreter', (), {
      'debug': debug,
      'evaluate': lambda self, ast_node, env=None: evaluate(ast_node, env),
      'evaluate_form': lambda self, form, env=None: evaluate_form(form, env),
      'run': lambda self, ast_nodes, env=None: run(ast_nodes, env)
  })()


def create_debug_interpreter():
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
