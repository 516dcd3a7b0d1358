"""Tokenizador, parser descendente recursivo y árbol de la expresión canónica.

Pipeline
--------
1) tokenize: texto canónico -> lista plana de tokens.
2) ExpressionParser: tokens -> árbol {Number, Constant, BinaryOp, UnaryNegate, Call}.
3) evaluate_tree(tree, namespace): recorre el árbol con las funciones enlazadas.

Los nombres se resuelven al construir el árbol, así que un identificador
desconocido es un error estructural y nunca llega a evaluarse.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple

from evaluation_errors import (
    DomainError,
    ExpressionSyntaxError,
    NonFiniteError,
    UnboundNameError,
)


# Límite de anidamiento: mantiene la recursión del parser lejos del
# límite del intérprete.
MAX_NESTING = 64


class Token(NamedTuple):
    kind: str
    text: str
    position: int


_TOKEN_PATTERN = re.compile(
    r"""
    (?P<NUMBER>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<NAME>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<OP>\*\*|[-+*/(),])
    |(?P<SPACE>\s+)
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> list[Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise ExpressionSyntaxError(
                f"Carácter inesperado {text[pos]!r} en la posición {pos}", text
            )
        kind = match.lastgroup
        if kind != "SPACE":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("END", "", len(text)))
    return tokens


# ── Nodos del árbol ──────────────────────────────────────────────
#
# Cada nodo expone children() y apply(); evaluate_tree() los recorre con
# una pila explícita, así que una cadena larga como 1+1+...+1 no consume
# un marco del intérprete por operador.


class Number:
    def __init__(self, value: float):
        self.value = value

    def children(self):
        return ()

    def apply(self, values, namespace: dict) -> float:
        return self.value

    def evaluate(self, namespace: dict) -> float:
        return evaluate_tree(self, namespace)

    def __repr__(self):
        return f"Number({self.value!r})"


class Constant:
    def __init__(self, name: str):
        self.name = name

    def children(self):
        return ()

    def apply(self, values, namespace: dict) -> float:
        return namespace[self.name]

    def evaluate(self, namespace: dict) -> float:
        return evaluate_tree(self, namespace)

    def __repr__(self):
        return f"Constant({self.name!r})"


class UnaryNegate:
    def __init__(self, operand):
        self.operand = operand

    def children(self):
        return (self.operand,)

    def apply(self, values, namespace: dict) -> float:
        return -values[0]

    def evaluate(self, namespace: dict) -> float:
        return evaluate_tree(self, namespace)

    def __repr__(self):
        return f"UnaryNegate({self.operand!r})"


class BinaryOp:
    """Operación binaria: left <operator> right."""

    def __init__(self, operator: str, left, right):
        self.operator = operator
        self.left = left
        self.right = right

    def children(self):
        return (self.left, self.right)

    def apply(self, values, namespace: dict) -> float:
        left_value, right_value = values

        if self.operator == "+":
            return left_value + right_value
        if self.operator == "-":
            return left_value - right_value
        if self.operator == "*":
            return left_value * right_value
        if self.operator == "/":
            if right_value == 0:
                raise NonFiniteError("División por cero")
            return left_value / right_value
        if self.operator == "**":
            # math.pow: base negativa con exponente no entero es ValueError,
            # nunca un complejo.
            try:
                return math.pow(left_value, right_value)
            except OverflowError as exc:
                raise NonFiniteError("Resultado demasiado grande") from exc
            except ValueError as exc:
                raise DomainError(
                    f"Potencia fuera de dominio: {left_value}**{right_value}"
                ) from exc
        raise ExpressionSyntaxError(f"Operador desconocido: {self.operator}")

    def evaluate(self, namespace: dict) -> float:
        return evaluate_tree(self, namespace)

    def __repr__(self):
        return f"BinaryOp({self.operator!r}, left={self.left}, right={self.right})"


class Call:
    def __init__(self, name: str, argument):
        self.name = name
        self.argument = argument

    def children(self):
        return (self.argument,)

    def apply(self, values, namespace: dict) -> float:
        value = values[0]
        try:
            return namespace[self.name](value)
        except OverflowError as exc:
            raise NonFiniteError(f"{self.name}({value}) desborda") from exc
        except ValueError as exc:
            raise DomainError(f"{self.name}({value}) fuera de dominio") from exc

    def evaluate(self, namespace: dict) -> float:
        return evaluate_tree(self, namespace)

    def __repr__(self):
        return f"Call({self.name!r}, {self.argument!r})"


def evaluate_tree(root, namespace: dict) -> float:
    """Evalúa el árbol en post-orden con una pila explícita."""
    results = []
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        children = node.children()
        if expanded or not children:
            values = results[len(results) - len(children):]
            del results[len(results) - len(children):]
            results.append(node.apply(values, namespace))
            continue
        stack.append((node, True))
        for child in reversed(children):
            stack.append((child, False))
    return results[0]


# ── Parser ───────────────────────────────────────────────────────


class ExpressionParser:
    """Parser descendente recursivo sobre los tokens del texto canónico.

    Precedencia, de menor a mayor: suma/resta, producto/división,
    signo unario, potencia (asociativa a derecha) y primarios.
    """

    def __init__(self, functions, constants):
        self._functions = frozenset(functions)
        self._constants = frozenset(constants)
        self._tokens: list[Token] = []
        self._pos = 0
        self._nesting = 0
        self._text = ""

    def parse(self, text: str):
        self._text = text
        self._tokens = tokenize(text)
        self._pos = 0
        self._nesting = 0

        tree = self._expression()
        if self._peek().kind != "END":
            self._unexpected()
        return tree

    # ── Utilidades ───────────────────────────────────────────────

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _accept(self, text: str) -> bool:
        tok = self._peek()
        if tok.kind == "OP" and tok.text == text:
            self._pos += 1
            return True
        return False

    def _expect(self, text: str):
        if not self._accept(text):
            raise ExpressionSyntaxError(
                f"Se esperaba {text!r} en la posición {self._peek().position}",
                self._text,
            )

    def _unexpected(self):
        tok = self._peek()
        if tok.kind == "END":
            raise ExpressionSyntaxError("Fin de expresión inesperado", self._text)
        raise ExpressionSyntaxError(
            f"Token inesperado {tok.text!r} en la posición {tok.position}",
            self._text,
        )

    def _enter(self):
        self._nesting += 1
        if self._nesting > MAX_NESTING:
            raise ExpressionSyntaxError("Demasiados niveles de anidamiento", self._text)

    def _leave(self):
        self._nesting -= 1

    # ── Reglas ───────────────────────────────────────────────────

    def _expression(self):
        node = self._term()
        while True:
            tok = self._peek()
            if tok.kind == "OP" and tok.text in ("+", "-"):
                self._advance()
                node = BinaryOp(tok.text, node, self._term())
            else:
                return node

    def _term(self):
        node = self._unary()
        while True:
            tok = self._peek()
            if tok.kind == "OP" and tok.text in ("*", "/"):
                self._advance()
                node = BinaryOp(tok.text, node, self._unary())
            else:
                return node

    def _unary(self):
        negate = False
        while True:
            tok = self._peek()
            if tok.kind == "OP" and tok.text in ("+", "-"):
                self._advance()
                if tok.text == "-":
                    negate = not negate
            else:
                break
        node = self._power()
        return UnaryNegate(node) if negate else node

    def _power(self):
        base = self._primary()
        if self._accept("**"):
            self._enter()
            exponent = self._unary()
            self._leave()
            return BinaryOp("**", base, exponent)
        return base

    def _primary(self):
        tok = self._peek()

        if tok.kind == "NUMBER":
            self._advance()
            return Number(float(tok.text))

        if tok.kind == "NAME":
            self._advance()
            if self._accept("("):
                if tok.text not in self._functions:
                    raise UnboundNameError(f"Función no permitida: {tok.text}", self._text)
                self._enter()
                argument = self._expression()
                self._leave()
                self._expect(")")
                return Call(tok.text, argument)
            if tok.text in self._functions:
                raise ExpressionSyntaxError(
                    f"Falta '(' después de {tok.text}", self._text
                )
            if tok.text not in self._constants:
                raise UnboundNameError(f"Identificador no permitido: {tok.text}", self._text)
            return Constant(tok.text)

        if self._accept("("):
            self._enter()
            node = self._expression()
            self._leave()
            self._expect(")")
            return node

        self._unexpected()
