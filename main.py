"""
Once - Main Entry Point
Driving loop for the write-once binding evaluator.
Forms are read one per line as JSON, e.g. ["define", "b", ["+", "a", 1]]
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, Optional, TextIO
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from result import OK, unpack_outcome
from environment import EMPTY_ENV
from interpreter import create_interpreter
from error_handling import OnceInputError, decode_form, format_eval_error
from session import SessionRegistry
from utilities import show_raw, show_env, show_env_lines


VERSION = "Once v0.1.0"
PROMPT = "once> "
QUIT_SENTINEL = "quit"
HISTORY_FILE = "~/.onceval_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Once - expression evaluator with write-once bindings',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s forms.jsonl            # Evaluate one JSON form per line
  %(prog)s -i                     # Interactive mode
  %(prog)s --debug forms.jsonl    # Trace evaluation
  %(prog)s -i --debug             # Interactive mode with tracing
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='file with one JSON form per line'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace every evaluation step'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


# ============================================================================
# OUTCOME DISPLAY
# ============================================================================

def format_outcome(outcome: Dict) -> str:
  """Render an outcome the way the driver prints it"""
  tag, first, env = unpack_outcome(outcome)
  if tag == OK:
    return f"=> {show_raw(first)}\n  env: {show_env(env)}"
  return format_eval_error(first, env)


def evaluate_line(line: str, env: Dict, interpreter, out: TextIO) -> Dict:
  """Decode and evaluate one line, print the outcome, return the next env"""
  try:
    form = decode_form(line)
  except OnceInputError as e:
    print(str(e), file=out)
    return env

  outcome = interpreter.evaluate_form(form, env)
  print(format_outcome(outcome), file=out)
  _, _, env = unpack_outcome(outcome)
  return env


def is_skippable(line: str) -> bool:
  stripped = line.strip()
  return not stripped or stripped.startswith('#')


# ============================================================================
# SCRIPT MODE
# ============================================================================

def run_lines(lines, env: Optional[Dict] = None, debug: bool = False,
              out: Optional[TextIO] = None) -> Dict:
  """Evaluate lines in order until they run out or the quit sentinel"""
  out = sys.stdout if out is None else out
  interpreter = create_interpreter(debug)
  env = EMPTY_ENV if env is None else env

  for line in lines:
    if is_skippable(line):
      continue
    if line.strip() == QUIT_SENTINEL:
      break
    env = evaluate_line(line, env, interpreter, out)

  return env


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a file of forms"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      lines = f.read().split('\n')
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)

  final_env = run_lines(lines, debug=debug)
  if debug:
    print(f"\nFinal environment:")
    print(show_env_lines(final_env))


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(1000)

  completions = [
      '["define", ', '["assign", ', '["remove", ',
      '["+", ', '["-", ', '["*", ', '["/", ',
      ":env", ":undo", ":help", QUIT_SENTINEL
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(lambda: readline.write_history_file(history_file))


def show_help(out: Optional[TextIO] = None) -> None:
  out = sys.stdout if out is None else out
  print("REPL Commands:", file=out)
  print("  :env              - Show current environment", file=out)
  print("  :undo             - Restore the environment before the last form", file=out)
  print("  :help             - Show this help", file=out)
  print(f"  {QUIT_SENTINEL:<17} - Exit REPL", file=out)
  print(file=out)
  print("Forms (JSON):", file=out)
  print('  ["define", "a"]              - Declare a without a value', file=out)
  print('  ["define", "b", ["+", "a", 1]] - Declare and initialise b', file=out)
  print('  ["assign", "a", 5]           - Give a its one value', file=out)
  print('  ["remove", "b"]              - Delete b', file=out)
  print('  "a"                          - Look a up', file=out)


def handle_repl_line(code: str, session, out: Optional[TextIO] = None) -> bool:
  """
  Handle one REPL line against a session actor proxy.
  Returns False when the quit sentinel is read.
  """
  out = sys.stdout if out is None else out
  command = code.strip()

  if command == QUIT_SENTINEL:
    return False
  if is_skippable(code):
    return True

  if command == ":env":
    print("Current environment:", file=out)
    print(show_env_lines(session.environment().get()), file=out)
  elif command == ":undo":
    tag, first, env = unpack_outcome(session.undo().get())
    if tag == OK:
      print(f"  env: {show_env(env)}", file=out)
    else:
      print(format_eval_error(first, env), file=out)
  elif command == ":help":
    show_help(out)
  else:
    try:
      form = decode_form(code)
    except OnceInputError as e:
      print(str(e), file=out)
      return True
    print(format_outcome(session.evaluate_form(form).get()), file=out)

  return True


def run_interactive_mode(debug: bool = False) -> None:
  """Run Once in interactive mode on a session actor"""
  print(f"{VERSION} - Interactive Mode")
  print(f"Type '{QUIT_SENTINEL}' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  registry = SessionRegistry()
  _, actor_ref = registry.start_session(debug=debug)
  session = actor_ref.proxy()

  try:
    while True:
      try:
        code = input(PROMPT)
      except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")
        break

      if not handle_repl_line(code, session):
        break
  finally:
    registry.terminate_all()


def main() -> None:
  """Main entry point for Once"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)
    run_script_file(args.script, debug=args.debug)
  else:
    run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
