"""Bounded scalar goal seek (bisection) for driver values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class GoalSeekResult:
    status: str
    value: float | None
    achieved: float | None
    iterations: int
    message: str

    @property
    def solved(self) -> bool:
        return self.status == "solved"


def _failed(message: str, iterations: int = 0, value: float | None = None, achieved: float | None = None) -> GoalSeekResult:
    return GoalSeekResult("failed", value, achieved, iterations, message)


def scan_bracket(
    evaluator: Callable[[float], float],
    target: float,
    lower_bound: float,
    upper_bound: float,
    steps: int = 8,
) -> tuple[float, float] | None:
    """Find the first sub-interval of ``[lower_bound, upper_bound]`` where the target is crossed."""
    width = (upper_bound - lower_bound) / steps
    x_prev = lower_bound
    f_prev = evaluator(x_prev) - target
    for k in range(1, steps + 1):
        x = lower_bound + width * k
        f = evaluator(x) - target
        if f_prev == 0 or f_prev * f <= 0:
            return x_prev, x
        x_prev, f_prev = x, f
    return None


def solve_bounded_scalar(
    evaluator: Callable[[float], float],
    target: float,
    lower_bound: float,
    upper_bound: float,
    tol: float = 1e-3,
    max_iter: int = 60,
    scan_steps: int = 0,
) -> GoalSeekResult:
    """Solve ``evaluator(x) = target`` on ``[lower_bound, upper_bound]`` by bisection.

    With ``scan_steps`` > 0 the interval is first sampled to locate a crossing when
    the endpoints alone do not bracket the target.
    """
    lo = float(lower_bound)
    hi = float(upper_bound)
    if hi <= lo:
        return _failed("Upper bound must be greater than lower bound.")

    try:
        f_lo = float(evaluator(lo)) - target
        f_hi = float(evaluator(hi)) - target
    except (ArithmeticError, ValueError) as exc:
        return _failed(f"Evaluator failed at bounds: {exc}")

    if f_lo == 0:
        return GoalSeekResult("solved", lo, f_lo + target, 0, "Solved at lower bound.")
    if f_hi == 0:
        return GoalSeekResult("solved", hi, f_hi + target, 0, "Solved at upper bound.")
    if f_lo * f_hi > 0:
        bracket = scan_bracket(evaluator, target, lo, hi, scan_steps) if scan_steps > 0 else None
        if bracket is None:
            return _failed("Target is not bracketed in the selected bounds. Adjust min/max bounds.")
        lo, hi = bracket
        f_lo = float(evaluator(lo)) - target
        if f_lo == 0:
            return GoalSeekResult("solved", lo, target, 0, "Solved at scanned grid point.")

    for i in range(1, max_iter + 1):
        mid = 0.5 * (lo + hi)
        f_mid = float(evaluator(mid)) - target
        if abs(f_mid) <= tol:
            return GoalSeekResult("solved", mid, f_mid + target, i, "Converged.")
        if f_lo * f_mid < 0:
            hi = mid
        else:
            lo, f_lo = mid, f_mid

    mid = 0.5 * (lo + hi)
    return _failed("Reached max iterations before tolerance was met.", max_iter, mid, float(evaluator(mid)))
