"""Errores internos de evaluación.

Todos derivan de ValueError para que el motor pueda colapsarlos en un
único resultado vacío sin distinguir la causa ante la interfaz.
"""

from __future__ import annotations


class EvaluationError(ValueError):
    """Base de los fallos de evaluación."""

    def __init__(self, message: str, expression: str | None = None):
        super().__init__(message)
        self.message = message
        self.expression = expression


class ExpressionSyntaxError(EvaluationError):
    """Texto canónico que no se puede analizar."""


class UnboundNameError(EvaluationError):
    """Identificador fuera de las funciones y constantes enlazadas."""


class DomainError(EvaluationError):
    """Función aplicada fuera de su dominio (sqrt(-1), asin(2), ...)."""


class NonFiniteError(EvaluationError):
    """División por cero, desbordamiento o resultado NaN/infinito."""
