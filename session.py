"""
Evaluation sessions for Once (Using Pykka)
Each session actor owns one environment and threads it from one
evaluation to the next. Pykka delivers messages one at a time, so a
session never needs locking; separate sessions share nothing.
"""

from typing import Any, Dict, List, Optional, Tuple
import uuid

import pykka

from result import make_outcome_ok, make_outcome_err, unpack_outcome
from environment import EMPTY_ENV
from interpreter import eval_ast, eval_form
from error_handling import NOTHING_TO_UNDO


class SessionActor(pykka.ThreadingActor):
  """Actor holding one session's environment and its undo history"""

  def __init__(self, session_id: str, env: Optional[Dict] = None, debug: bool = False):
    super().__init__()
    self.session_id = session_id
    self.env = EMPTY_ENV if env is None else env
    self.history: List[Dict] = []
    self.debug = debug

  def _record(self, outcome: Dict) -> Dict:
    _, _, new_env = unpack_outcome(outcome)
    self.history.append(self.env)
    self.env = new_env
    return outcome

  def evaluate(self, ast_node: Dict) -> Dict:
    """Evaluate an expression node against the session environment"""
    return self._record(eval_ast(ast_node, self.env, self.debug))

  def evaluate_form(self, form: Any) -> Dict:
    """Decode and evaluate a form against the session environment"""
    return self._record(eval_form(form, self.env, self.debug))

  def environment(self) -> Dict:
    return self.env

  def undo(self) -> Dict:
    """Restore the environment from before the last evaluation"""
    if not self.history:
      return make_outcome_err(NOTHING_TO_UNDO, self.env)
    self.env = self.history.pop()
    return make_outcome_ok("ok", self.env)

  def reset(self) -> Dict:
    self.history = []
    self.env = EMPTY_ENV
    return make_outcome_ok("ok", self.env)


class SessionRegistry:
  """Registry for managing session actors"""

  def __init__(self):
    self.sessions: Dict[str, pykka.ActorRef] = {}

  def start_session(self, env: Optional[Dict] = None, debug: bool = False) -> Tuple[str, pykka.ActorRef]:
    """Start a session actor and register it under a fresh id"""
    session_id = str(uuid.uuid4())
    actor_ref = SessionActor.start(session_id, env, debug)
    self.sessions[session_id] = actor_ref
    return session_id, actor_ref

  def get_session(self, session_id: str) -> Optional[pykka.ActorRef]:
    return self.sessions.get(session_id)

  def stop_session(self, session_id: str) -> bool:
    """Stop one session; False if the id is unknown"""
    actor_ref = self.sessions.pop(session_id, None)
    if actor_ref is None:
      return False
    actor_ref.stop()
    return True

  def terminate_all(self):
    """Stop every registered session"""
    for actor_ref in self.sessions.values():
      try:
        actor_ref.stop()
      except pykka.ActorDeadError:
        pass
    self.sessions.clear()
