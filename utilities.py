"""
Utilities module for Once
Rendering of values and environments for drivers and sessions
"""

from typing import Any, Dict
from fractions import Fraction

from environment import is_unbound, env_items


UNBOUND_TEXT = "<unbound>"


# ==================== VALUE RENDERING ====================

def show_raw(value: Any) -> str:
  """
  Render a raw outcome value

  Examples:
    show_raw(5) -> "5"
    show_raw(Fraction(1, 3)) -> "1/3"
    show_raw("ok") -> "ok"
  """
  if isinstance(value, Fraction):
    if value.denominator == 1:
      return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"
  return str(value)


def show_value(value: Dict) -> str:
  """Render a runtime value dict; Unbound slots get a marker"""
  if is_unbound(value):
    return UNBOUND_TEXT
  return show_raw(value['value'])


# ==================== ENVIRONMENT RENDERING ====================

def show_env(env: Dict) -> str:
  """
  Render bindings newest first

  Examples:
    show_env(EMPTY_ENV) -> "{}"
    show_env(env with b=6 then a=5) -> "{b: 6, a: 5}"
  """
  parts = [f"{name}: {show_value(value)}" for name, value in env_items(env)]
  return "{" + ", ".join(parts) + "}"


def show_env_lines(env: Dict, max_width: int = 60) -> str:
  """Render one binding per line, truncating long values"""
  lines = []
  for name, value in env_items(env):
    val_str = show_value(value)
    if len(val_str) > max_width:
      val_str = val_str[:max_width - 3] + "..."
    lines.append(f"  {name} = {val_str}")
  return "\n".join(lines) if lines else "  (no bindings)"
