# ExpressionEditor.py
"""
Expression buffer and the rules for inserting calculator keys into it.

Every key of the calculator is a member of Token. Inserting a token goes through
these steps, in this order:

1) Sanitize:   a buffer showing 'nan' (any case) is stale error output -> cleared.
2) Resolve:    some keys insert something other than their label
               (√ -> 'sqrt', xʸ -> '^', π -> '3.141593', Ans -> last result).
3) Operator:   an operator typed into an empty buffer gets a left operand,
               the last result if there is one, otherwise '0'.
4) Function:   function names get '()' appended and the caret goes inside.
5) Insert:     the text replaces the selection, caret after it
               ('()' puts the caret between the parentheses).
6) Caret fix:  one-character buffers force the caret to 1, otherwise the
               π key puts the caret right after the inserted digits.

The editor only knows the session through `last_result` and `clear_history()`.
"""
import logging
from enum import Enum

from . import error as E

logger = logging.getLogger(__name__)

MATH_OPERATORS = ("+", "-", "/", "*", "%", "^")
MATH_FUNCTIONS = ("sin", "cos", "tan", "log", "ln", "sqrt", "pow")
SENTINEL = "nan"
PI_LITERAL = "3.141593"


def isOperator(text):
    return text.lower() in MATH_OPERATORS


def isFunction(text):
    return text.lower() in MATH_FUNCTIONS


class TokenClass(Enum):
    DIGIT = "digit"
    OPERATOR = "operator"
    FUNCTION = "function"
    CONSTANT = "constant"
    RECALL = "recall"
    LITERAL = "literal"


class Token(Enum):
    """Calculator keys. The value is the key label."""
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    DOT = "."
    PARENTHESIS = "()"

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULUS = "%"
    POW = "xʸ"

    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LOG = "log"
    LN = "ln"
    SQRT = "√"

    PI = "π"
    ANS = "Ans"

    @property
    def label(self):
        return self.value

    @property
    def token_class(self):
        return TOKEN_CLASSES[self]

    def resolve(self, last_result=""):
        """Text this key inserts, or None if it inserts nothing."""
        if self is Token.ANS:
            return last_result or None
        return RESOLVED_TEXT.get(self, self.value)


RESOLVED_TEXT = {
    Token.POW: "^",
    Token.SQRT: "sqrt",
    Token.PI: PI_LITERAL,
}

TOKEN_CLASSES = {
    Token.ZERO: TokenClass.DIGIT,
    Token.ONE: TokenClass.DIGIT,
    Token.TWO: TokenClass.DIGIT,
    Token.THREE: TokenClass.DIGIT,
    Token.FOUR: TokenClass.DIGIT,
    Token.FIVE: TokenClass.DIGIT,
    Token.SIX: TokenClass.DIGIT,
    Token.SEVEN: TokenClass.DIGIT,
    Token.EIGHT: TokenClass.DIGIT,
    Token.NINE: TokenClass.DIGIT,
    Token.DOT: TokenClass.LITERAL,
    Token.PARENTHESIS: TokenClass.LITERAL,
    Token.ADD: TokenClass.OPERATOR,
    Token.SUBTRACT: TokenClass.OPERATOR,
    Token.MULTIPLY: TokenClass.OPERATOR,
    Token.DIVIDE: TokenClass.OPERATOR,
    Token.MODULUS: TokenClass.OPERATOR,
    Token.POW: TokenClass.OPERATOR,
    Token.SIN: TokenClass.FUNCTION,
    Token.COS: TokenClass.FUNCTION,
    Token.TAN: TokenClass.FUNCTION,
    Token.LOG: TokenClass.FUNCTION,
    Token.LN: TokenClass.FUNCTION,
    Token.SQRT: TokenClass.FUNCTION,
    Token.PI: TokenClass.CONSTANT,
    Token.ANS: TokenClass.RECALL,
}


class ExpressionBuffer:
    """Text plus caret. The selection always starts at the caret."""

    def __init__(self, text="", caret=None):
        self.text = text
        self.caret = len(text) if caret is None else caret
        self.selection_length = 0

    def __len__(self):
        return len(self.text)

    def is_empty(self):
        return self.text == ""

    @property
    def selected_text(self):
        return self.text[self.caret:self.caret + self.selection_length]

    def set_text(self, text):
        self.text = text
        self.caret = 0
        self.selection_length = 0

    def move_caret(self, pos):
        self.caret = pos
        self.selection_length = 0

    def select(self, start, length):
        self.caret = start
        self.selection_length = length

    def replace_selection(self, text):
        end = self.caret + self.selection_length
        self.text = self.text[:self.caret] + text + self.text[end:]
        self.caret += len(text)
        self.selection_length = 0


class ExpressionEditor:

    def __init__(self, session, focus_requested=None):
        self.session = session
        self.buffer = ExpressionBuffer()
        self.focus_requested = focus_requested

    @property
    def text(self):
        return self.buffer.text

    @property
    def caret(self):
        return self.buffer.caret

    def _request_focus(self):
        if self.focus_requested is not None:
            self.focus_requested()

    def insert(self, token):
        if not isinstance(token, Token):
            token = Token(token)

        if SENTINEL in self.buffer.text.lower():
            self.buffer.set_text("")

        cached_caret = self.buffer.caret

        text = token.resolve(self.session.last_result)
        if text is None:
            # Ans before any result
            return

        if isOperator(text) and self.buffer.is_empty():
            text = (self.session.last_result or "0") + text

        is_pi = token is Token.PI

        if isFunction(text):
            text += "()"
            self.buffer.replace_selection(text)
            self.set_caret(self.buffer.caret - 1)
        else:
            self.buffer.replace_selection(text)
            if text == "()":
                self.set_caret(self.buffer.caret - 1)

        # Order matters: the one-character rule wins over the π rule
        if 0 < len(self.buffer) < 2:
            self.set_caret(1)
        elif is_pi:
            self.set_caret(cached_caret + len(text))

        self._request_focus()

    def delete(self):
        if self.buffer.selection_length > 0:
            self.buffer.replace_selection("")
        elif self.buffer.caret > 0 and not self.buffer.is_empty():
            pos = self.buffer.caret
            self.buffer.text = self.buffer.text[:pos - 1] + self.buffer.text[pos:]
            self.buffer.move_caret(pos - 1)

        self._request_focus()

    def clear(self):
        """Empty the buffer and the history. The last result survives."""
        self.buffer.set_text("")
        self.session.clear_history()

    def set_caret(self, pos):
        if pos < 0:
            logger.warning("%s%s", E.ERROR_MESSAGES["4101"], pos)
            return
        self.buffer.move_caret(min(pos, len(self.buffer)))

    def select(self, start, length):
        start = max(0, min(start, len(self.buffer)))
        length = max(0, min(length, len(self.buffer) - start))
        self.buffer.select(start, length)

    def replace_selection(self, text):
        self.buffer.replace_selection(text)

    def set_text(self, text, caret=None):
        """Mirror text typed directly into the input field."""
        self.buffer.set_text(text)
        self.set_caret(len(text) if caret is None else caret)
