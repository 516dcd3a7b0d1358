"""Funciones especiales: aproximación de Gamma y factorial extendido."""

import math


# Aproximación de Lanczos, g = 7, tabla de 9 coeficientes publicada.
LANCZOS_G = 7
LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)

# 171! ya no cabe en un double.
MAX_EXACT_FACTORIAL = 170


def gamma(z: float) -> float:
    """Aproxima Γ(z) para z real.

    Para z < 0.5 usa la fórmula de reflexión
    Γ(z) = π / (sin(πz)·Γ(1−z)). Los enteros no positivos son polos
    y devuelven NaN.
    """
    if not math.isfinite(z):
        return math.nan
    if z <= 0 and z == math.floor(z):
        return math.nan

    if z < 0.5:
        return math.pi / (math.sin(math.pi * z) * gamma(1 - z))

    z -= 1
    x = LANCZOS_COEFFICIENTS[0]
    for i in range(1, LANCZOS_G + 2):
        x += LANCZOS_COEFFICIENTS[i] / (z + i)
    t = z + LANCZOS_G + 0.5
    return math.sqrt(2 * math.pi) * t ** (z + 0.5) * math.exp(-t) * x


def factorial(n: float) -> float:
    """Factorial exacto para enteros no negativos, Γ(n+1) para el resto.

    Negativos y valores no finitos devuelven NaN; enteros mayores que
    MAX_EXACT_FACTORIAL devuelven infinito.
    """
    n = float(n)
    if not math.isfinite(n) or n < 0:
        return math.nan

    if n != math.floor(n):
        try:
            return gamma(n + 1)
        except OverflowError:
            return math.inf

    if n > MAX_EXACT_FACTORIAL:
        return math.inf
    return float(math.factorial(int(n)))
