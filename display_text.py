"""Texto de pantalla: formato de resultados y cambio de signo del último operando."""

from __future__ import annotations

import math
import re

SIGNIFICANT_DIGITS = 12

# Igual que toPrecision: notación exponencial solo fuera de [-6, 12).
_MIN_FIXED_EXPONENT = -6

_TRAILING_OPERAND = re.compile(r"(?:\d*\.?\d+(?:e[+-]?\d+)?|π|e)$")
_TRAILING_NAME = re.compile(r"[A-Za-z]+$")


def format_number(n: float) -> str:
    """Formatea n con 12 cifras significativas sin ceros sobrantes.

    El redondeo es el de format() sobre el valor binario exacto
    (mitad al par). Un valor no finito devuelve "Error".
    """
    if not math.isfinite(n):
        return "Error"
    if n == 0:
        return "0"

    mantissa, exponent = f"{n:.{SIGNIFICANT_DIGITS - 1}e}".split("e")
    exponent = int(exponent)

    if _MIN_FIXED_EXPONENT <= exponent < SIGNIFICANT_DIGITS:
        return _trim_zeros(f"{n:.{SIGNIFICANT_DIGITS - 1 - exponent}f}")

    sign = "+" if exponent >= 0 else "-"
    return f"{_trim_zeros(mantissa)}e{sign}{abs(exponent)}"


def _trim_zeros(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")


def toggle_sign(expression: str) -> str:
    """Envuelve el último operando de la expresión en una negación.

    El operando es un grupo entre paréntesis (con su nombre de función,
    si lo hay), un número o una de las constantes π y e. Sin operando
    reconocible se antepone '-' a toda la expresión.
    """
    if not expression:
        return "-"

    if expression.endswith(")"):
        start = _matching_open_paren(expression)
        if start is None:
            return "-" + expression
        name = _TRAILING_NAME.search(expression, 0, start)
        if name:
            start = name.start()
    else:
        match = _TRAILING_OPERAND.search(expression)
        if match is None:
            return "-" + expression
        start = match.start()

    return f"{expression[:start]}(-{expression[start:]})"


def _matching_open_paren(expression: str) -> int | None:
    depth = 0
    for i in range(len(expression) - 1, -1, -1):
        if expression[i] == ")":
            depth += 1
        elif expression[i] == "(":
            depth -= 1
            if depth == 0:
                return i
    return None
