"""
Motor de cálculo para la calculadora científica.

Este módulo provee la clase CalculatorEngine, que canonicaliza, evalúa y
formatea expresiones de la pantalla, y CalculatorSession, que guarda el
estado de una sesión (expresión, vista previa, memoria e historial).

Contrato de interfaz:
    - try_evaluate(expression: str) -> float | None
    - preview(expression: str) -> str
    - angle_mode: propiedad AngleMode.DEGREES | AngleMode.RADIANS
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from display_text import format_number, toggle_sign
from evaluation_errors import EvaluationError
from formula_evaluator import (
    AngleMode,
    FormulaEvaluator,
    PythonMathProvider,
    canonicalize,
)

logger = logging.getLogger(__name__)


class CalculatorEngine:
    """Evalúa expresiones de la pantalla con funciones científicas."""

    def __init__(self, angle_mode=AngleMode.DEGREES):
        self._provider = PythonMathProvider()
        self._evaluator = FormulaEvaluator(self._provider)
        self._angle_mode = AngleMode(angle_mode)

    # ── Propiedad: modo angular ──────────────────────────────────

    @property
    def angle_mode(self) -> AngleMode:
        return self._angle_mode

    @angle_mode.setter
    def angle_mode(self, mode):
        self._angle_mode = AngleMode(mode)

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate(self, expression: str) -> float:
        """Evalúa la expresión de la pantalla.

        Raises:
            EvaluationError: cualquiera de sus subclases; ver FormulaEvaluator.
        """
        return self._evaluator.evaluate(canonicalize(expression), self._angle_mode)

    def try_evaluate(self, expression: str) -> float | None:
        """Como evaluate(), pero un fallo devuelve None."""
        try:
            return self.evaluate(expression)
        except EvaluationError as exc:
            logger.debug(
                "Sin resultado para %r (canónica %r): %s", expression, exc.expression, exc
            )
            return None

    def preview(self, expression: str) -> str:
        """Texto del resultado en vivo; cadena vacía si no hay resultado."""
        value = self.try_evaluate(expression)
        if value is None:
            return ""
        return format_number(value)


class HistoryEntry(NamedTuple):
    expression: str
    result: str


class CalculatorSession:
    """Estado de una sesión de calculadora.

    Cada cambio de la expresión o del modo angular recalcula `result`.
    """

    MAX_HISTORY = 20
    CONSTANTS = ("π", "e")

    def __init__(self, engine: CalculatorEngine | None = None):
        self.engine = engine if engine is not None else CalculatorEngine()
        self._expression = ""
        self.result = "0"
        self.memory = 0.0
        self.history: list[HistoryEntry] = []

    # ── Expresión ────────────────────────────────────────────────

    @property
    def expression(self) -> str:
        return self._expression

    def set_expression(self, expression: str):
        self._expression = expression
        self._refresh()

    def append(self, text: str):
        self.set_expression(self._expression + text)

    def clear(self):
        self._expression = ""
        self.result = "0"

    def backspace(self):
        self.set_expression(self._expression[:-1])

    def insert_constant(self, name: str):
        if name not in self.CONSTANTS:
            raise ValueError(f"Constante desconocida: {name}")
        self.append(name)

    def percent(self):
        # % equivale a *0.01 sobre el valor anterior
        self.append("*0.01")

    def toggle_sign(self):
        self.set_expression(toggle_sign(self._expression))

    def _refresh(self):
        self.result = self.engine.preview(self._expression)

    # ── Modo angular ─────────────────────────────────────────────

    @property
    def angle_mode(self) -> AngleMode:
        return self.engine.angle_mode

    @angle_mode.setter
    def angle_mode(self, mode):
        self.engine.angle_mode = mode
        self._refresh()

    def toggle_angle_mode(self) -> AngleMode:
        if self.engine.angle_mode is AngleMode.DEGREES:
            self.angle_mode = AngleMode.RADIANS
        else:
            self.angle_mode = AngleMode.DEGREES
        return self.angle_mode

    # ── Memoria ──────────────────────────────────────────────────

    def memory_clear(self):
        self.memory = 0.0

    def memory_recall(self):
        self.append(format_number(self.memory))

    def memory_add(self):
        value = self.engine.try_evaluate(self._expression)
        if value is not None:
            self.memory += value

    def memory_subtract(self):
        value = self.engine.try_evaluate(self._expression)
        if value is not None:
            self.memory -= value

    # ── Cálculo e historial ──────────────────────────────────────

    def calculate(self) -> str | None:
        """Confirma el resultado y lo guarda en el historial.

        Devuelve el texto del resultado, o None si la expresión no tiene
        resultado (en cuyo caso nada cambia).
        """
        value = self.engine.try_evaluate(self._expression)
        if value is None:
            return None

        result = format_number(value)
        self.history.insert(0, HistoryEntry(self._expression, result))
        del self.history[self.MAX_HISTORY:]
        logger.info("%s = %s", self._expression, result)

        self._expression = result
        self.result = result
        return result

    def recall_history(self, index: int):
        self.set_expression(self.history[index].result)
