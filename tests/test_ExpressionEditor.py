import logging

import pytest

from Bifrost.ExpressionEditor import (
    ExpressionEditor,
    ExpressionBuffer,
    Token,
    TokenClass,
    PI_LITERAL,
    isOperator,
    isFunction,
)
from Bifrost.Session import HistoryEntry


@pytest.fixture
def editor(session):
    return ExpressionEditor(session)


def test_token_classes_and_resolution():
    assert Token.SEVEN.token_class is TokenClass.DIGIT
    assert Token.POW.token_class is TokenClass.OPERATOR
    assert Token.SQRT.token_class is TokenClass.FUNCTION
    assert Token.PI.token_class is TokenClass.CONSTANT
    assert Token.ANS.token_class is TokenClass.RECALL
    assert Token.PARENTHESIS.token_class is TokenClass.LITERAL

    assert Token.POW.resolve() == "^"
    assert Token.SQRT.resolve() == "sqrt"
    assert Token.PI.resolve() == "3.141593"
    assert Token.ANS.resolve("") is None
    assert Token.ANS.resolve("42") == "42"
    assert Token.LN.resolve() == "ln"


def test_every_token_has_a_class():
    for token in Token:
        assert isinstance(token.token_class, TokenClass)


def test_operator_and_function_sets():
    for op in ["+", "-", "/", "*", "%", "^"]:
        assert isOperator(op)
    for name in ["sin", "COS", "tan", "log", "ln", "sqrt", "pow"]:
        assert isFunction(name)
    assert not isOperator("sin")
    assert not isFunction("pi")


@pytest.mark.parametrize("token, expected", [
    (Token.ADD, "0+"),
    (Token.SUBTRACT, "0-"),
    (Token.MULTIPLY, "0*"),
    (Token.DIVIDE, "0/"),
    (Token.MODULUS, "0%"),
    (Token.POW, "0^"),
])
def test_operator_into_empty_buffer_defaults_to_zero(editor, token, expected):
    editor.insert(token)
    assert editor.text == expected
    assert editor.caret == len(expected)


def test_operator_into_empty_buffer_uses_last_result(editor, session):
    session.last_result = "42"
    editor.insert(Token.DIVIDE)
    assert editor.text == "42/"
    assert editor.caret == 3


def test_operator_after_operand_is_not_prefixed(editor, session):
    session.last_result = "42"
    editor.insert(Token.FIVE)
    editor.insert(Token.ADD)
    assert editor.text == "5+"
    assert editor.caret == 2


def test_function_gets_parentheses_with_caret_inside(editor):
    editor.insert(Token.SIN)
    assert editor.text == "sin()"
    assert editor.caret == 4


def test_sqrt_key_inserts_sqrt_function(editor):
    editor.insert(Token.TWO)
    editor.insert(Token.MULTIPLY)
    editor.insert(Token.SQRT)
    assert editor.text == "2*sqrt()"
    assert editor.caret == len("2*sqrt(")


def test_function_inserted_in_the_middle(editor):
    editor.set_text("12")
    editor.set_caret(1)
    editor.insert(Token.COS)
    assert editor.text == "1cos()2"
    assert editor.caret == 5


def test_typing_inside_function_parentheses(editor):
    editor.insert(Token.LOG)
    editor.insert(Token.ONE)
    editor.insert(Token.ZERO)
    assert editor.text == "log(10)"
    assert editor.caret == 6


def test_parenthesis_literal_puts_caret_inside(editor):
    editor.insert(Token.PARENTHESIS)
    assert editor.text == "()"
    assert editor.caret == 1


@pytest.mark.parametrize("stale", ["nanXYZ", "NaN", "12nAn", "syntax NAN"])
def test_sentinel_in_buffer_clears_before_insert(editor, stale):
    editor.set_text(stale)
    editor.insert(Token.ONE)
    assert editor.text == "1"
    assert editor.caret == 1


def test_sentinel_cleared_even_before_function(editor):
    editor.set_text("nan")
    editor.insert(Token.TAN)
    assert editor.text == "tan()"


def test_recall_without_result_inserts_nothing(editor):
    calls = []
    editor.focus_requested = lambda: calls.append(True)
    editor.set_text("2*")
    editor.insert(Token.ANS)
    assert editor.text == "2*"
    assert editor.caret == 2
    assert calls == []


def test_recall_inserts_last_result(editor, session):
    session.last_result = "3.500000"
    editor.set_text("2*")
    editor.insert(Token.ANS)
    assert editor.text == "2*3.500000"
    assert editor.caret == len("2*3.500000")


def test_recall_into_empty_buffer_with_one_character_result(editor, session):
    session.last_result = "7"
    editor.insert(Token.ANS)
    assert editor.text == "7"
    assert editor.caret == 1


def test_single_character_buffer_caret_is_one(editor):
    editor.insert(Token.EIGHT)
    assert editor.text == "8"
    assert editor.caret == 1


def test_pi_inserts_literal_with_caret_after_it(editor):
    editor.insert(Token.PI)
    assert editor.text == PI_LITERAL
    assert editor.caret == len(PI_LITERAL)


def test_pi_in_the_middle_of_expression(editor):
    editor.set_text("2+1")
    editor.set_caret(2)
    editor.insert(Token.PI)
    assert editor.text == "2+3.1415931"
    assert editor.caret == 2 + len(PI_LITERAL)


def test_insert_replaces_selection(editor):
    editor.set_text("123")
    editor.select(1, 1)
    editor.insert(Token.NINE)
    assert editor.text == "193"
    assert editor.caret == 2


def test_insert_accepts_key_labels(editor):
    editor.insert("√")
    assert editor.text == "sqrt()"


def test_insert_requests_focus(session):
    calls = []
    editor = ExpressionEditor(session, focus_requested=lambda: calls.append(True))
    editor.insert(Token.ONE)
    editor.delete()
    assert len(calls) == 2


def test_delete_walks_back_to_empty(editor):
    editor.set_text("12")
    assert editor.caret == 2

    editor.delete()
    assert (editor.text, editor.caret) == ("1", 1)

    editor.delete()
    assert (editor.text, editor.caret) == ("", 0)

    editor.delete()
    assert (editor.text, editor.caret) == ("", 0)


def test_delete_removes_character_before_caret(editor):
    editor.set_text("123")
    editor.set_caret(2)
    editor.delete()
    assert editor.text == "13"
    assert editor.caret == 1


def test_delete_at_start_is_noop(editor):
    editor.set_text("12")
    editor.set_caret(0)
    editor.delete()
    assert editor.text == "12"
    assert editor.caret == 0


def test_delete_removes_selection(editor):
    editor.set_text("12345")
    editor.select(1, 3)
    editor.delete()
    assert editor.text == "15"
    assert editor.caret == 1


def test_clear_empties_buffer_and_history_but_keeps_last_result(editor, session):
    session.last_result = "5"
    session.history.append(HistoryEntry("2+3", "5"))
    editor.set_text("9*")
    editor.clear()
    assert editor.text == ""
    assert editor.caret == 0
    assert session.history == []
    assert session.last_result == "5"


def test_negative_caret_is_logged_and_ignored(editor, caplog):
    editor.set_text("123")
    editor.set_caret(1)
    with caplog.at_level(logging.WARNING, logger="Bifrost"):
        editor.set_caret(-1)
    assert editor.text == "123"
    assert editor.caret == 1
    assert "Caret less than 0: -1" in caplog.text


def test_caret_beyond_end_is_clamped(editor):
    editor.set_text("123")
    editor.set_caret(10)
    assert editor.caret == 3


def test_select_is_clamped_into_buffer(editor):
    editor.set_text("abc")
    editor.select(2, 10)
    assert editor.buffer.selected_text == "c"


def test_buffer_replace_selection():
    buffer = ExpressionBuffer("hello")
    buffer.select(0, 5)
    buffer.replace_selection("bye")
    assert buffer.text == "bye"
    assert buffer.caret == 3
    assert buffer.selection_length == 0
