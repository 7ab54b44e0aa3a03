# Session.py
"""
Calculator state that outlives single key presses: the last result and the
history of finished calculations, plus the Calculator that ties the editor, the
session and the evaluation bridge together.

Evaluation runs in three steps so the blocking device call can live on a worker
thread:

    request = calculator.begin_evaluation()            # UI thread, takes the token
    outcome = calculator.run_evaluation(request, ...)   # any thread, blocks on the port
    calculator.finish_evaluation(request, outcome)      # UI thread, releases the token

Only one request can hold the token. A second begin_evaluation() while one is in
flight raises EvaluationBusyError.
"""
import itertools
import logging
from typing import NamedTuple

from . import error as E
from .ExpressionEditor import ExpressionEditor
from .EvaluationBridge import EvaluationBridge, NormalizedValue
from .Transport import DEFAULT_BAUDRATE

logger = logging.getLogger(__name__)


class HistoryEntry(NamedTuple):
    expression: str
    result: str

    def __str__(self):
        return f"{self.expression} = {self.result}"


class EvaluationRequest(NamedTuple):
    token: int
    expression: str


class CalculatorSession:

    def __init__(self):
        self.last_result = ""
        self.history = []  # most recent first

    def record(self, expression, result):
        self.last_result = result
        entry = HistoryEntry(expression, result)
        self.history.insert(0, entry)
        return entry

    def clear_history(self):
        self.history.clear()

    def reset(self):
        self.last_result = ""
        self.history.clear()


class Calculator:

    def __init__(self, session=None, bridge=None, focus_requested=None):
        self.session = session or CalculatorSession()
        self.editor = ExpressionEditor(self.session, focus_requested=focus_requested)
        self.bridge = bridge or EvaluationBridge()
        self._tokens = itertools.count(1)
        self._in_flight = None

    # --- Editing ---
    def insert(self, token):
        self.editor.insert(token)

    def delete(self):
        self.editor.delete()

    def clear(self):
        self.editor.clear()

    def set_caret(self, pos):
        self.editor.set_caret(pos)

    def select_history(self, index):
        """Insert the result of a history entry at the caret."""
        if not 0 <= index < len(self.session.history):
            logger.warning("%s%s", E.ERROR_MESSAGES["4102"], index)
            return
        result = self.session.history[index].result.strip()
        if result:
            self.editor.replace_selection(result)

    # --- Evaluation ---
    @property
    def busy(self):
        return self._in_flight is not None

    def begin_evaluation(self):
        if self._in_flight is not None:
            raise E.EvaluationBusyError(E.ERROR_MESSAGES["4002"], expression=self._in_flight.expression)
        request = EvaluationRequest(next(self._tokens), self.editor.text)
        self._in_flight = request
        logger.debug("Evaluation %s started: %r", request.token, request.expression)
        return request

    def run_evaluation(self, request, port, baudrate=DEFAULT_BAUDRATE):
        """Blocking device call. Returns a NormalizedValue or the EvalError that occurred."""
        try:
            return self.bridge.evaluate(request.expression, port, baudrate)
        except E.EvalError as e:
            logger.warning("Evaluation %s failed (%s): %s", request.token, e.code, e.message)
            return e
        except Exception as e:
            # A bug, not a device answer. Still has to reach finish_evaluation to free the token.
            logger.exception("Evaluation %s crashed", request.token)
            critical_error = E.BifrostError(
                message=f"{E.ERROR_MESSAGES['9999']}{e}",
                code="9999",
                expression=request.expression
            )
            critical_error.__cause__ = e
            return critical_error

    def finish_evaluation(self, request, outcome):
        """Apply the outcome of `request`. Returns the new HistoryEntry, or raises the error."""
        if self._in_flight is None or request.token != self._in_flight.token:
            logger.warning("Ignoring outcome of stale evaluation %s", request.token)
            return None
        self._in_flight = None

        if isinstance(outcome, BaseException):
            raise outcome

        if isinstance(outcome, NormalizedValue):
            outcome = outcome.text

        entry = self.session.record(request.expression, outcome)
        # Only drain what was sent; anything typed while waiting stays
        if self.editor.text == request.expression:
            self.editor.buffer.set_text("")
        logger.info("%s", entry)
        return entry

    def evaluate(self, port, baudrate=DEFAULT_BAUDRATE):
        request = self.begin_evaluation()
        outcome = self.run_evaluation(request, port, baudrate)
        return self.finish_evaluation(request, outcome)
