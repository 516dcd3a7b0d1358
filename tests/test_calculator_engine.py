import logging
import math

import pytest

from calculator_engine import CalculatorEngine, CalculatorSession, HistoryEntry
from display_text import format_number
from evaluation_errors import EvaluationError
from formula_evaluator import AngleMode


@pytest.fixture
def engine():
    return CalculatorEngine()


@pytest.fixture
def session():
    return CalculatorSession()


def test_default_angle_mode_is_degrees(engine):
    assert engine.angle_mode is AngleMode.DEGREES


def test_angle_mode_accepts_text(engine):
    engine.angle_mode = "rad"
    assert engine.angle_mode is AngleMode.RADIANS
    with pytest.raises(ValueError):
        engine.angle_mode = "grad"


@pytest.mark.parametrize(
    "expression, text",
    [
        ("2+2", "4"),
        ("1/3", "0.333333333333"),
        ("5!", "120"),
        ("0!", "1"),
        ("(2!)!", "2"),
        ("2+3×4", "14"),
        ("2^3^2", "512"),
        ("2×3^2", "18"),
        ("-2^2", "-4"),
        ("10−4−3", "3"),
        ("sin(90)", "1"),
        ("cos(60)", "0.5"),
        ("asin(0.5)", "30"),
        ("log(1000)", "3"),
        ("ln(e)", "1"),
        ("√(16)", "4"),
        ("2π÷π", ""),
        ("", "0"),
    ],
)
def test_preview(engine, expression, text):
    assert engine.preview(expression) == text


@pytest.mark.parametrize("expression", ["(-1)!", "1÷0", "sqrt(-4)", "2+", "abc"])
def test_preview_without_result(engine, expression):
    assert engine.preview(expression) == ""
    assert engine.try_evaluate(expression) is None


def test_evaluate_raises_on_failure(engine):
    with pytest.raises(EvaluationError):
        engine.evaluate("1÷0")


def test_angle_mode_changes_trigonometry(engine):
    degrees = engine.try_evaluate("sin(90)")
    engine.angle_mode = AngleMode.RADIANS
    radians = engine.try_evaluate("sin(90)")
    assert degrees == pytest.approx(1.0)
    assert radians == pytest.approx(math.sin(90))
    assert radians != pytest.approx(1.0)


def test_repeated_evaluation_is_identical(engine):
    expr = "sin(33)^2+cos(33)^2+4.5!"
    assert engine.try_evaluate(expr) == engine.try_evaluate(expr)


def test_session_starts_idle(session):
    assert session.expression == ""
    assert session.result == "0"
    assert session.memory == 0
    assert session.history == []


def test_live_preview_follows_edits(session):
    session.append("2")
    assert session.result == "2"
    session.append("+")
    assert session.result == ""
    session.append("3")
    assert session.result == "5"
    session.backspace()
    assert session.expression == "2+"
    assert session.result == ""


def test_calculate_commits_result(session):
    session.set_expression("2+3")
    assert session.calculate() == "5"
    assert session.expression == "5"
    assert session.result == "5"
    assert session.history == [HistoryEntry("2+3", "5")]


def test_calculate_failure_changes_nothing(session):
    session.set_expression("1÷0")
    assert session.calculate() is None
    assert session.expression == "1÷0"
    assert session.history == []


def test_history_is_newest_first_and_capped(session):
    for i in range(25):
        session.set_expression(f"{i}+0")
        session.calculate()
    assert len(session.history) == CalculatorSession.MAX_HISTORY
    assert session.history[0] == HistoryEntry("24+0", "24")
    assert session.history[-1] == HistoryEntry("5+0", "5")


def test_recall_history(session):
    session.set_expression("6×7")
    session.calculate()
    session.clear()
    session.recall_history(0)
    assert session.expression == "42"
    assert session.result == "42"


def test_clear(session):
    session.set_expression("1+")
    session.clear()
    assert session.expression == ""
    assert session.result == "0"


def test_percent(session):
    session.set_expression("50")
    session.percent()
    assert session.expression == "50*0.01"
    assert session.result == "0.5"


def test_insert_constant(session):
    session.insert_constant("π")
    assert session.result == "3.14159265359"
    with pytest.raises(ValueError):
        session.insert_constant("φ")


def test_toggle_sign_updates_preview(session):
    session.set_expression("12+3")
    session.toggle_sign()
    assert session.expression == "12+(-3)"
    assert session.result == "9"


def test_toggle_angle_mode_recomputes_preview(session):
    session.set_expression("sin(90)")
    assert session.result == "1"
    assert session.toggle_angle_mode() is AngleMode.RADIANS
    assert session.result == format_number(math.sin(90))
    assert session.toggle_angle_mode() is AngleMode.DEGREES
    assert session.result == "1"


def test_memory_register(session):
    session.set_expression("2+3")
    session.memory_add()
    assert session.memory == 5
    session.set_expression("1")
    session.memory_subtract()
    assert session.memory == 4
    session.set_expression("1÷0")
    session.memory_add()
    assert session.memory == 4

    session.set_expression("2×")
    session.memory_recall()
    assert session.expression == "2×4"
    assert session.result == "8"

    session.memory_clear()
    assert session.memory == 0


def test_long_sums_have_a_result(engine):
    assert engine.preview("1" + "+1" * 300) == "301"
    assert engine.preview("2" + "×1" * 1000) == "2"


def test_failure_log_names_display_and_canonical_text(engine, caplog):
    with caplog.at_level(logging.DEBUG, logger="calculator_engine"):
        assert engine.try_evaluate("2×√(-1)") is None
    assert "'2×√(-1)'" in caplog.text
    assert "'2*SQRT(-1)'" in caplog.text
