from calculator_engine import CalculatorEngine
from display_text import format_number, toggle_sign
from formula_evaluator import AngleMode, canonicalize
from special_functions import gamma, factorial
from mpmath import mp
import sys


def _relative_error(actual: float, expected) -> float:
	expected = float(expected)
	if expected == 0:
		return abs(actual)
	return abs(actual - expected) / abs(expected)


def inspect_expression(expr: str, *, mode: str = "deg") -> None:
	"""Imprime cada etapa del pipeline para una expresión."""
	engine = CalculatorEngine(mode)
	value = engine.try_evaluate(expr)

	print("Pipeline inspection")
	print(f"expr:       {expr}")
	print(f"mode:       {engine.angle_mode.value}")
	print(f"canonical:  {canonicalize(expr)}")
	print(f"value:      {value!r}")
	print(f"display:    {engine.preview(expr) or '(sin resultado)'}")
	print(f"toggled:    {toggle_sign(expr)}")


def run_regressions() -> None:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []

	with mp.workdps(50):
		for z in ("0.5", "1.5", "2.25", "7.5", "-0.5", "-2.5", "30.1"):
			err = _relative_error(gamma(float(z)), mp.gamma(mp.mpf(z)))
			checks.append((f"gamma({z}) within 1e-12 of mpmath", err < 1e-12))

		for n in ("0.5", "3.3", "10.75"):
			err = _relative_error(factorial(float(n)), mp.factorial(mp.mpf(n)))
			checks.append((f"{n}! within 1e-12 of mpmath", err < 1e-12))

		for n in (0, 1, 5, 20, 170):
			exact = int(mp.factorial(n))
			checks.append((f"{n}! exact to double rounding", factorial(n) == float(exact)))

	checks.append(("171! overflows to infinity", factorial(171) == float("inf")))
	checks.append(("gamma pole at 0 gives NaN", gamma(0.0) != gamma(0.0)))

	deg = CalculatorEngine(AngleMode.DEGREES)
	rad = CalculatorEngine(AngleMode.RADIANS)

	for expr, expected in (
		("2+2", "4"),
		("1/3", "0.333333333333"),
		("5!", "120"),
		("0!", "1"),
		("(2!)!", "2"),
		("3!!", "720"),
		("2^10", "1024"),
		("2×3÷4", "1.5"),
		("sin(90)", "1"),
		("asin(0.5)", "30"),
		("log(1000)", "3"),
		("ln(e)", "1"),
		("sqrt(16)", "4"),
		("1e15", "1e+15"),
		("0.000001", "0.000001"),
		("10^-7", "1e-7"),
	):
		actual = deg.preview(expr)
		expected_actual.append((expr, expected, actual))
		checks.append((f"{expr} displays {expected}", actual == expected))

	with mp.workdps(30):
		expected_pi = mp.nstr(mp.pi, 12)
	expected_actual.append(("π (rad)", expected_pi, rad.preview("π")))
	checks.append(("π matches mpmath to 12 digits", rad.preview("π") == expected_pi))

	checks.append(("sin(90) in radians is not 1", rad.preview("sin(90)") != "1"))
	checks.append(("(-1)! has no result", deg.preview("(-1)!") == ""))
	checks.append(("1/0 has no result", deg.preview("1/0") == ""))
	checks.append(("unknown names have no result", deg.preview("__import__(1)") == ""))
	checks.append(("empty expression evaluates to 0", deg.preview("") == "0"))
	checks.append(("NaN formats as Error", format_number(float("nan")) == "Error"))

	for expr, expected in (
		("", "-"),
		("12+3", "12+(-3)"),
		("12+(3*4)", "12+(-(3*4))"),
		("2×π", "2×(-π)"),
	):
		actual = toggle_sign(expr)
		expected_actual.append((f"toggle {expr!r}", expected, actual))
		checks.append((f"toggle_sign({expr!r})", actual == expected))

	failed = [name for name, ok in checks if not ok]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_checks.py
	#   python regression_checks.py --inspect "sin(30)!"
	#   python regression_checks.py --inspect "sin(π/2)" --mode rad
	if "--inspect" in sys.argv:
		try:
			expr = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing expression after --inspect")

		mode = "deg"
		if "--mode" in sys.argv:
			try:
				mode = sys.argv[sys.argv.index("--mode") + 1]
			except IndexError:
				raise SystemExit("Missing value for --mode")
			if mode not in ("deg", "rad"):
				raise SystemExit("Invalid value for --mode")

		inspect_expression(expr, mode=mode)
	else:
		run_regressions()
