"""
Persistent environment for the Once evaluator
Bindings are kept newest-first in a tuple of (name, value) pairs.
Every operation returns a new environment; old ones are never touched.
"""

from typing import Any, Dict, List, Optional, Tuple


# ============================================================================
# RUNTIME VALUES (Immutable Dictionaries)
# ============================================================================

def make_value(value: Any, type_name: str = "Unknown") -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_number(n: Any) -> Dict:
  return make_value(n, "Num")


# Declared but never assigned
UNBOUND = make_value(None, "Unbound")


def is_unbound(value: Dict) -> bool:
  return value.get('type') == "Unbound"


def is_number(value: Dict) -> bool:
  return value.get('type') == "Num"


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_env(bindings: Optional[List[Tuple[str, Dict]]] = None) -> Dict:
  """Create an immutable environment from (name, value) pairs, newest first"""
  return {
      'bindings': tuple(bindings or ())
  }


EMPTY_ENV = make_env()


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def env_lookup(env: Dict, name: str) -> Optional[Tuple[str, Dict]]:
  """Return the binding for name, or None"""
  for binding in env['bindings']:
    if binding[0] == name:
      return binding
  return None


def env_is_defined(env: Dict, name: str) -> bool:
  return env_lookup(env, name) is not None


def env_get(env: Dict, name: str) -> Dict:
  """
  Value bound to name

  Callers check env_is_defined first; a missing name is a programming
  error and raises KeyError.
  """
  binding = env_lookup(env, name)
  if binding is None:
    raise KeyError(name)
  return binding[1]


def env_extend(env: Dict, name: str, value: Dict) -> Dict:
  """Return new environment with (name, value) prepended. Does not check uniqueness."""
  return {
      **env,
      'bindings': ((name, value),) + env['bindings']
  }


def env_update(env: Dict, name: str, value: Dict) -> Dict:
  """Return new environment where name holds value; absent name is a no-op"""
  if not env_is_defined(env, name):
    return env
  return {
      **env,
      'bindings': tuple(
          (bound_name, value if bound_name == name else bound_value)
          for bound_name, bound_value in env['bindings']
      )
  }


def env_remove(env: Dict, name: str) -> Dict:
  """Return new environment without name; absent name is a no-op"""
  if not env_is_defined(env, name):
    return env
  return {
      **env,
      'bindings': tuple(b for b in env['bindings'] if b[0] != name)
  }


# ============================================================================
# INSPECTION
# ============================================================================

def env_items(env: Dict) -> List[Tuple[str, Dict]]:
  return list(env['bindings'])


def env_names(env: Dict) -> List[str]:
  return [name for name, _ in env['bindings']]


def env_size(env: Dict) -> int:
  return len(env['bindings'])


def env_to_dict(env: Dict) -> Dict[str, Any]:
  """
  Plain {name: raw value} view, newest first

  Unbound slots map to None.
  """
  return {
      name: None if is_unbound(value) else value['value']
      for name, value in env['bindings']
  }
