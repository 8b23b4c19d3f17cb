from __future__ import annotations

from caseflow.goal_seek import scan_bracket, solve_bounded_scalar


def test_goal_seek_converges_on_simple_monotonic_function():
    result = solve_bounded_scalar(lambda x: 2 * x + 3, target=23, lower_bound=0, upper_bound=20, tol=1e-6)
    assert result.status == "solved"
    assert result.value is not None
    assert abs(result.value - 10.0) < 1e-4


def test_goal_seek_fails_when_target_not_bracketed():
    result = solve_bounded_scalar(lambda x: x * x + 1, target=0, lower_bound=0, upper_bound=5)
    assert result.status == "failed"
    assert "not bracketed" in result.message.lower()


def test_goal_seek_solves_at_bounds():
    assert solve_bounded_scalar(lambda x: x, target=0, lower_bound=0, upper_bound=5).message == "Solved at lower bound."
    assert solve_bounded_scalar(lambda x: x, target=5, lower_bound=0, upper_bound=5).message == "Solved at upper bound."


def test_goal_seek_rejects_inverted_bounds():
    result = solve_bounded_scalar(lambda x: x, target=1, lower_bound=5, upper_bound=0)
    assert not result.solved


def test_scan_finds_interior_crossing_of_non_monotonic_function():
    def hump(x: float) -> float:
        return -((x - 5.0) ** 2) + 10.0

    assert not solve_bounded_scalar(hump, target=6.0, lower_bound=0, upper_bound=10).solved
    result = solve_bounded_scalar(hump, target=6.0, lower_bound=0, upper_bound=10, tol=1e-6, scan_steps=8)
    assert result.solved
    assert abs(result.value - 3.0) < 1e-4
    assert scan_bracket(hump, 6.0, 0, 10, 8) == (2.5, 3.75)


def test_goal_seek_reports_evaluator_failure_at_bounds():
    def broken(x: float) -> float:
        return 1.0 / x

    result = solve_bounded_scalar(broken, target=1.0, lower_bound=0, upper_bound=2)
    assert not result.solved
    assert "Evaluator failed" in result.message
