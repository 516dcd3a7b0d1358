"""Punto de entrada de la calculadora científica en consola."""

import argparse
import logging
import sys

from calculator_engine import CalculatorEngine, CalculatorSession
from formula_evaluator import AngleMode


DEFAULT_ANGLE_MODE = AngleMode.DEGREES
PROMPT = "> "
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

HELP_TEXT = """\
Escribe una expresión para ver el resultado en vivo.
  =        confirmar el resultado y guardarlo en el historial
  :deg     modo grados          :rad    modo radianes
  :neg     cambiar el signo del último operando
  :mc :mr :m+ :m-               memoria
  :hist    historial            :clear  borrar
  :quit    salir"""


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Calculadora científica")
    parser.add_argument(
        "expressions",
        nargs="*",
        help="expresiones a evaluar sin entrar en modo interactivo",
    )
    parser.add_argument(
        "--angle-mode",
        choices=[mode.value for mode in AngleMode],
        default=DEFAULT_ANGLE_MODE.value,
        help="modo angular para sin/cos/tan (por defecto: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="registro DEBUG")
    return parser.parse_args(argv)


def run_batch(session: CalculatorSession, expressions) -> int:
    status = 0
    for expr in expressions:
        session.set_expression(expr)
        result = session.calculate()
        if result is None:
            print(f"{expr} = Error")
            status = 1
        else:
            print(f"{expr} = {result}")
    return status


def handle_command(session: CalculatorSession, line: str) -> bool:
    """Aplica una línea de la consola. Devuelve False para salir."""
    if line in (":quit", ":q"):
        return False

    if line == "=":
        if session.calculate() is None:
            print("Sin resultado")
    elif line == ":deg":
        session.angle_mode = AngleMode.DEGREES
    elif line == ":rad":
        session.angle_mode = AngleMode.RADIANS
    elif line == ":neg":
        session.toggle_sign()
    elif line == ":mc":
        session.memory_clear()
    elif line == ":mr":
        session.memory_recall()
    elif line == ":m+":
        session.memory_add()
    elif line == ":m-":
        session.memory_subtract()
    elif line == ":clear":
        session.clear()
    elif line == ":hist":
        for i, entry in enumerate(session.history):
            print(f"[{i}] {entry.expression} = {entry.result}")
        return True
    elif line == ":help":
        print(HELP_TEXT)
        return True
    else:
        session.set_expression(line)

    mode = session.angle_mode.value.upper()
    print(f"[{mode}] {session.expression or '0'}  →  {session.result}")
    return True


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    session = CalculatorSession(CalculatorEngine(args.angle_mode))
    if args.expressions:
        return run_batch(session, args.expressions)

    print(HELP_TEXT)
    while True:
        try:
            line = input(PROMPT).strip()
        except EOFError:
            return 0
        if not handle_command(session, line):
            return 0


if __name__ == "__main__":
    sys.exit(main())
