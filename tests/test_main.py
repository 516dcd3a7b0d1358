import math

from calculator_engine import CalculatorSession
from display_text import format_number
from formula_evaluator import AngleMode
from main import handle_command, main


def test_batch_mode_prints_results(capsys):
    assert main(["2+2", "5!"]) == 0
    assert capsys.readouterr().out == "2+2 = 4\n5! = 120\n"


def test_batch_mode_reports_failures(capsys):
    assert main(["1/0", "3"]) == 1
    assert capsys.readouterr().out == "1/0 = Error\n3 = 3\n"


def test_batch_mode_in_radians(capsys):
    assert main(["--angle-mode", "rad", "sin(90)"]) == 0
    assert capsys.readouterr().out == f"sin(90) = {format_number(math.sin(90))}\n"


def test_console_commands(capsys):
    session = CalculatorSession()
    assert handle_command(session, "2+3")
    assert handle_command(session, "=")
    assert session.history[0].result == "5"

    assert handle_command(session, ":rad")
    assert session.angle_mode is AngleMode.RADIANS

    assert handle_command(session, ":m+")
    assert session.memory == 5

    assert handle_command(session, ":neg")
    assert session.expression == "(-5)"

    assert handle_command(session, ":hist")
    assert "[0] 2+3 = 5" in capsys.readouterr().out

    assert not handle_command(session, ":quit")
