"""
Error taxonomy and error reporting for Once
Evaluation errors are reported values (Err outcomes) keyed by message;
exceptions are reserved for the driver boundary (decoding input forms)
"""

from typing import List, Optional, Dict
import json
from fractions import Fraction
import re

from utilities import show_env


# ============================================================================
# EVALUATION ERROR MESSAGES
# ============================================================================

INVALID_IDENTIFIER = "invalid identifier"
NOT_DEFINED = "not defined"
UNDEFINED = "undefined"
ALREADY_DEFINED = "already defined"
ID_NOT_DEFINED = "id not defined"
ALREADY_HAS_VALUE = "already has value"
REMOVE_NOT_DEFINED = "identifier not defined, ignoring"
DIVISION_BY_ZERO = "division by zero"
UNKNOWN_EXPRESSION = "unknown expression"
NOTHING_TO_UNDO = "nothing to undo"
NOT_A_NUMBER = "not a number"

DEFINE_USAGE = "usage: (define <id> [<expr>])"
ASSIGN_USAGE = "usage: (assign <id> <expr>)"
REMOVE_USAGE = "usage: (remove <id>)"


def operator_usage(op: str) -> str:
    return f"usage: ({op} <expr> <expr>)"


# ============================================================================
# ERROR KINDS
# ============================================================================

MALFORMED_REFERENCE = "malformed-reference"
REBINDING_VIOLATION = "rebinding-violation"
USAGE_VIOLATION = "usage-violation"
ARITHMETIC_VIOLATION = "arithmetic-violation"
STRUCTURAL_VIOLATION = "structural-violation"
SESSION_VIOLATION = "session-violation"

ERROR_KINDS = {
    INVALID_IDENTIFIER: MALFORMED_REFERENCE,
    NOT_DEFINED: MALFORMED_REFERENCE,
    UNDEFINED: MALFORMED_REFERENCE,
    ID_NOT_DEFINED: MALFORMED_REFERENCE,
    REMOVE_NOT_DEFINED: MALFORMED_REFERENCE,
    ALREADY_DEFINED: REBINDING_VIOLATION,
    ALREADY_HAS_VALUE: REBINDING_VIOLATION,
    DIVISION_BY_ZERO: ARITHMETIC_VIOLATION,
    NOT_A_NUMBER: ARITHMETIC_VIOLATION,
    UNKNOWN_EXPRESSION: STRUCTURAL_VIOLATION,
    NOTHING_TO_UNDO: SESSION_VIOLATION,
}


def classify_error(message: str) -> str:
    """Map an Err message to its error kind"""
    if message.startswith("usage: "):
        return USAGE_VIOLATION
    return ERROR_KINDS.get(message, STRUCTURAL_VIOLATION)


def format_eval_error(message: str, env: Dict) -> str:
    """Format an Err outcome for display"""
    return f"error: {message}\n  env: {show_env(env)}"


# ============================================================================
# INPUT DECODING ERRORS (Immutable Dictionaries)
# ============================================================================

def make_input_error(
    message: str,
    line: Optional[int] = None,
    column: Optional[int] = None,
    got: Optional[str] = None,
    excerpt: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable input error; line and column are None when unknown"""
    return {
        'message': message,
        'line': line,
        'column': column,
        'got': got,
        'excerpt': excerpt,
        'suggestions': suggestions or []
    }


def format_input_error(error: Dict) -> str:
    if error['line'] is None:
        error_msg = "Input error:\n"
    else:
        error_msg = f"Input error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['excerpt']:
        error_msg += f"{error['excerpt']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


def mark_column(text: str, col_num: int) -> str:
    """The offending text with a caret under col_num"""
    return f"    {text}\n    {' ' * (col_num - 1)}^ Error here"


def text_at(text: str, col_num: int) -> str:
    """Up to eleven characters starting at col_num, quoted"""
    found = text[col_num - 1:col_num + 10].strip()
    return f"'{found}'" if found else "end of line"


def generate_suggestions(message: str, got: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "(" in got or ")" in got:
        suggestions.append("Forms are JSON arrays - use [\"define\", \"x\", 1] instead of (define x 1)")

    if "'" in got.strip("'"):
        suggestions.append("Identifiers are JSON strings and need double quotes")

    if re.search(r"Expecting value", message) and got == "end of line":
        suggestions.append("The form is incomplete - check for a missing argument")

    if "Expecting ',' delimiter" in message:
        suggestions.append("Separate form elements with commas")

    return suggestions


def describe_decode_error(exc: json.JSONDecodeError, source_text: str) -> Dict:
    """Input error for a JSON syntax failure, pointing at the failing column"""
    failing_line = source_text.split('\n')[exc.lineno - 1]
    got = text_at(failing_line, exc.colno)
    return make_input_error(
        message=exc.msg,
        line=exc.lineno,
        column=exc.colno,
        got=got,
        excerpt=mark_column(failing_line, exc.colno),
        suggestions=generate_suggestions(exc.msg, got)
    )


# ============================================================================
# EXCEPTION CLASSES (driver boundary only)
# ============================================================================

class OnceInputError(Exception):
    """Raised when a line of driver input cannot be decoded into a form"""
    def __init__(self, error: Dict):
        self.error = error
        self.line = error['line']
        self.column = error['column']
        self.got = error['got']
        self.suggestions = error['suggestions']
        super().__init__(error['message'])

    def __str__(self) -> str:
        return format_input_error(self.error)


def decode_form(source_text: str):
    """Decode one JSON form, raising OnceInputError with context on failure"""
    try:
        return json.loads(source_text, parse_float=Fraction)
    except json.JSONDecodeError as e:
        raise OnceInputError(describe_decode_error(e, source_text)) from e
    except ValueError as e:
        # Well-formed JSON the decoder still refuses, e.g. over-long integers
        raise OnceInputError(make_input_error(message=str(e))) from e
