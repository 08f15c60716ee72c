"""
Identifier validation for the Once evaluator
"""

from typing import Any


IDENTIFIER_PUNCTUATION = "-_"


def is_identifier_char(char: str) -> bool:
  """Letters, digits, hyphen and underscore may follow the first letter"""
  return char.isalpha() or char.isnumeric() or char in IDENTIFIER_PUNCTUATION


def is_valid_identifier(token: Any) -> bool:
  """
  True iff token is a non-empty string starting with a letter and
  continuing with letters, digits, '-' or '_'

  Examples:
    is_valid_identifier("x") -> True
    is_valid_identifier("total-2_b") -> True
    is_valid_identifier("2x") -> False
    is_valid_identifier("") -> False
  """
  if not isinstance(token, str) or not token:
    return False
  if not token[0].isalpha():
    return False
  return all(is_identifier_char(c) for c in token[1:])
