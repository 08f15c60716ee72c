"""
Result algebra for the Once evaluator
Two variants, Ok and Err, carried as immutable dictionaries.
Evaluation never raises; every step returns one of these.
"""

from typing import Any, Dict, Tuple


OK = "Ok"
ERR = "Err"


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def make_ok(payload: Any) -> Dict:
  """Create a successful result"""
  return {
      'tag': OK,
      'payload': payload
  }


def make_err(payload: Any) -> Dict:
  """Create a failed result"""
  return {
      'tag': ERR,
      'payload': payload
  }


def make_outcome_ok(value: Any, env: Dict) -> Dict:
  """Ok(value, env) - the evaluator's success outcome"""
  return make_ok((value, env))


def make_outcome_err(message: str, env: Dict) -> Dict:
  """Err(message, env) - the evaluator's failure outcome"""
  return make_err((message, env))


# ============================================================================
# PREDICATES
# ============================================================================

def is_ok(result: Dict) -> bool:
  return result['tag'] == OK


def is_err(result: Dict) -> bool:
  return result['tag'] == ERR


# ============================================================================
# ACCESSORS (inspection only)
# ============================================================================

def ok_or(result: Dict, default: Any = None) -> Any:
  """
  Payload of an Ok result, or default for an Err

  Examples:
    ok_or(make_ok(3), 0) -> 3
    ok_or(make_err("boom"), 0) -> 0
  """
  return result['payload'] if is_ok(result) else default


def err_or(result: Dict, default: Any = None) -> Any:
  """Payload of an Err result, or default for an Ok"""
  return result['payload'] if is_err(result) else default


def unpack_outcome(outcome: Dict) -> Tuple[str, Any, Dict]:
  """
  Split an evaluation outcome into (tag, value_or_message, env)

  Both variants of an outcome carry an environment, so drivers can
  thread it forward without caring which branch was taken.
  """
  first, env = outcome['payload']
  return outcome['tag'], first, env
