"""Canonicalización y evaluación de expresiones para la calculadora científica."""

from __future__ import annotations

import logging
import math
import re
from enum import Enum

from evaluation_errors import EvaluationError, NonFiniteError
from expression_parser import ExpressionParser, evaluate_tree
from special_functions import factorial

logger = logging.getLogger(__name__)


class AngleMode(str, Enum):
    DEGREES = "deg"
    RADIANS = "rad"


class PythonMathProvider:
    """Provee funciones y constantes matemáticas en un namespace cerrado."""

    FUNCTION_NAMES = (
        "SIN",
        "COS",
        "TAN",
        "ASIN",
        "ACOS",
        "ATAN",
        "LN",
        "LOG",
        "SQRT",
        "FACT",
    )
    CONSTANT_NAMES = ("PI", "E")

    def build_namespace(self, angle_mode) -> dict:
        mode = AngleMode(angle_mode)

        def _trig(fn):
            def w(x):
                return fn(math.radians(x) if mode is AngleMode.DEGREES else x)

            return w

        def _inv_trig(fn):
            def w(x):
                r = fn(x)
                return math.degrees(r) if mode is AngleMode.DEGREES else r

            return w

        return {
            "SIN": _trig(math.sin),
            "COS": _trig(math.cos),
            "TAN": _trig(math.tan),
            "ASIN": _inv_trig(math.asin),
            "ACOS": _inv_trig(math.acos),
            "ATAN": _inv_trig(math.atan),
            "LN": math.log,
            "LOG": math.log10,
            "SQRT": math.sqrt,
            "FACT": factorial,
            "PI": math.pi,
            "E": math.e,
        }


# ── Canonicalización ─────────────────────────────────────────────

_EULER_PATTERN = re.compile(r"\be\b")
_FUNCTION_PATTERN = re.compile(
    r"(asin|acos|atan|sin|cos|tan|ln|log|sqrt)\(", re.IGNORECASE
)
_NUMBER_SUFFIX = re.compile(r"(?:\d*\.?\d+)(?:e[+-]?\d+)?$")
_IDENTIFIER_SUFFIX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*$")


def canonicalize(expression: str) -> str:
    """Transforma la expresión de la pantalla en texto canónico.

    Nunca falla: una entrada inválida produce un texto que el evaluador
    rechaza después.
    """
    if not expression:
        return ""

    expr = expression
    expr = expr.replace("×", "*")
    expr = expr.replace("÷", "/")
    expr = expr.replace("−", "-")
    expr = expr.replace("√(", "sqrt(")
    expr = expr.replace("^", "**")
    expr = expr.replace("π", "PI")
    expr = _EULER_PATTERN.sub("E", expr)
    expr = _replace_factorial(expr)
    # La alternancia prueba asin/acos/atan antes que sin/cos/tan.
    expr = _FUNCTION_PATTERN.sub(lambda m: m.group(1).upper() + "(", expr)
    return expr


def _replace_factorial(expr: str) -> str:
    """Reescribe cada `operando!` como `FACT(operando)`, de izquierda a derecha.

    El operando es un grupo entre paréntesis balanceado (junto con el nombre
    de función que lo precede, si lo hay) o un literal numérico. Una marca
    sin operando válido se deja en su sitio.
    """
    pos = 0
    while True:
        i = expr.find("!", pos)
        if i == -1:
            return expr

        start = _factorial_operand_start(expr, i)
        if start is None:
            pos = i + 1
            continue

        operand = expr[start:i]
        replacement = f"FACT({operand})"
        expr = expr[:start] + replacement + expr[i + 1:]
        pos = start + len(replacement)


def _factorial_operand_start(expr: str, bang: int) -> int | None:
    j = bang - 1
    if j < 0:
        return None

    if expr[j] == ")":
        depth = 0
        while j >= 0:
            if expr[j] == ")":
                depth += 1
            elif expr[j] == "(":
                depth -= 1
                if depth == 0:
                    break
            j -= 1
        if j < 0:
            return None
        name = _IDENTIFIER_SUFFIX.search(expr, 0, j)
        return name.start() if name else j

    match = _NUMBER_SUFFIX.search(expr, 0, bang)
    if match is None:
        return None
    # Un literal pegado a un identificador ("x1") no es un número.
    if match.start() > 0 and re.match(r"[A-Za-z_]", expr[match.start() - 1]):
        return None
    return match.start()


# ── Evaluación ───────────────────────────────────────────────────


class FormulaEvaluator:
    """Analiza el texto canónico y lo evalúa contra el namespace del proveedor."""

    def __init__(self, provider: PythonMathProvider | None = None):
        self._provider = provider if provider is not None else PythonMathProvider()

    def evaluate(self, canonical: str, angle_mode=AngleMode.DEGREES) -> float:
        """Evalúa el texto canónico.

        Raises:
            ExpressionSyntaxError: texto que no se puede analizar.
            UnboundNameError: identificador fuera de la lista enlazada.
            DomainError: función fuera de su dominio.
            NonFiniteError: división por cero, desbordamiento o NaN.
        """
        if not canonical:
            return 0.0

        namespace = self._provider.build_namespace(angle_mode)
        parser = ExpressionParser(
            self._provider.FUNCTION_NAMES,
            self._provider.CONSTANT_NAMES,
        )
        tree = parser.parse(canonical)
        try:
            value = evaluate_tree(tree, namespace)
        except EvaluationError as exc:
            if exc.expression is None:
                exc.expression = canonical
            raise

        if not math.isfinite(value):
            raise NonFiniteError(f"Resultado no finito: {value}", canonical)
        return value


_default_evaluator = FormulaEvaluator()


def evaluate(canonical: str, angle_mode=AngleMode.DEGREES) -> float | None:
    """Evalúa el texto canónico; None representa "sin resultado"."""
    try:
        return _default_evaluator.evaluate(canonical, angle_mode)
    except EvaluationError as exc:
        logger.debug("Evaluación fallida para %r: %s", exc.expression, exc)
        return None
