from __future__ import annotations

from typing import Protocol


class TargetRatioSmoothing(Protocol):
    name: str

    def next_target(self, *, current_target: int, observed_ratio: int, lookback_period: int) -> int:
        ...


class EmaTargetSmoothing:
    """
    Exponential moving average over ``lookback_period`` pokes.

    target' = target + (ratio - target) * 2 / (lookback_period + 1)

    The step is truncated toward zero so the target never overshoots the
    observed ratio, and the result is floored at 1 (a zero target would
    make every later deviation undefined).
    """

    name = "ema"

    def next_target(self, *, current_target: int, observed_ratio: int, lookback_period: int) -> int:
        if lookback_period < 0:
            raise ValueError("lookback_period must be non-negative.")
        periods = lookback_period + 1
        diff = observed_ratio - current_target
        step = (abs(diff) * 2) // periods
        if step > abs(diff):
            step = abs(diff)
        new_target = current_target + step if diff >= 0 else current_target - step
        return max(new_target, 1)


class FixedTargetSmoothing:
    name = "fixed"

    def next_target(self, *, current_target: int, observed_ratio: int, lookback_period: int) -> int:
        _ = (observed_ratio, lookback_period)
        return current_target


_STRATEGIES: dict[str, type] = {
    EmaTargetSmoothing.name: EmaTargetSmoothing,
    FixedTargetSmoothing.name: FixedTargetSmoothing,
}


def get_smoothing_strategy(name: str) -> TargetRatioSmoothing:
    key = (name or "").strip().lower()
    strategy_cls = _STRATEGIES.get(key)
    if strategy_cls is None:
        raise ValueError(f"Unknown target ratio smoothing '{name}'.")
    return strategy_cls()
