"""Constraint-curve interpolation.

Monotone piecewise cubic Hermite interpolation (PCHIP) over tabulated
performance curves. Constraint curves are physical envelopes, so the
interpolant must pass through every sample and never overshoot between
samples; samples are not guaranteed to be evenly spaced.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class CurveEstimate:
    """Result of evaluating a curve: either a value or a diagnostic."""
    value: Optional[float] = None
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _valid_points(xs: Sequence[float], ys: Sequence[float]) -> tuple[list[float], list[float]]:
    """Drop pairs where either coordinate is missing or non-finite."""
    px, py = [], []
    for x, y in zip(xs, ys):
        if x is None or y is None:
            continue
        if not (math.isfinite(x) and math.isfinite(y)):
            continue
        px.append(float(x))
        py.append(float(y))
    return px, py


def _endpoint_slope(h0: float, h1: float, d0: float, d1: float) -> float:
    """Shape-preserving three-point derivative at a curve endpoint."""
    slope = ((2 * h0 + h1) * d0 - h0 * d1) / (h0 + h1)
    if _sign(slope) != _sign(d0):
        return 0.0
    if _sign(d0) != _sign(d1) and abs(slope) > abs(3 * d0):
        return 3 * d0
    return slope


def pchip_slopes(xs: Sequence[float], ys: Sequence[float]) -> list[float]:
    """Derive knot tangents for strictly increasing ``xs``.

    Interior knots use the weighted harmonic mean of the adjacent secants,
    forced to zero at local extrema and limited to three times the smaller
    secant magnitude.
    """
    n = len(xs)
    h = [xs[i + 1] - xs[i] for i in range(n - 1)]
    delta = [(ys[i + 1] - ys[i]) / h[i] for i in range(n - 1)]

    if n == 2:
        return [delta[0], delta[0]]

    slopes = [0.0] * n
    for i in range(1, n - 1):
        d0, d1 = delta[i - 1], delta[i]
        if d0 == 0 or d1 == 0 or _sign(d0) != _sign(d1):
            slopes[i] = 0.0
            continue
        w1 = 2 * h[i] + h[i - 1]
        w2 = h[i] + 2 * h[i - 1]
        slope = (w1 + w2) / (w1 / d0 + w2 / d1)
        limit = 3 * min(abs(d0), abs(d1))
        if abs(slope) > limit:
            slope = math.copysign(limit, slope)
        slopes[i] = slope

    slopes[0] = _endpoint_slope(h[0], h[1], delta[0], delta[1])
    slopes[-1] = _endpoint_slope(h[-1], h[-2], delta[-1], delta[-2])
    return slopes


def _hermite(x0: float, x1: float, y0: float, y1: float, m0: float, m1: float, x: float) -> float:
    """Evaluate the cubic Hermite segment between two knots."""
    h = x1 - x0
    t = (x - x0) / h
    t2 = t * t
    t3 = t2 * t
    h00 = 2 * t3 - 3 * t2 + 1
    h10 = t3 - 2 * t2 + t
    h01 = -2 * t3 + 3 * t2
    h11 = t3 - t2
    return h00 * y0 + h10 * h * m0 + h01 * y1 + h11 * h * m1


def pchip(xs: Sequence[float], ys: Sequence[float], x: float) -> Optional[float]:
    """Interpolate ``ys(xs)`` at ``x`` with a monotone cubic Hermite spline.

    Args:
        xs: Sample abscissas; pairs with non-finite coordinates are dropped
            and the remaining values must be strictly increasing.
        ys: Sample ordinates, same length as ``xs``.
        x: Query point. Outside the sample domain the boundary segment's
            cubic is reused.

    Returns:
        The interpolated value, or None when fewer than two valid samples
        remain, the samples are not strictly increasing or ``x`` is not finite.
    """
    if x is None or not math.isfinite(x):
        return None
    px, py = _valid_points(xs, ys)
    if len(px) < 2:
        return None
    if any(px[i + 1] <= px[i] for i in range(len(px) - 1)):
        return None

    slopes = pchip_slopes(px, py)

    # Bracketing interval, clamped so extrapolation uses the end segments
    k = 0
    while k < len(px) - 2 and x > px[k + 1]:
        k += 1

    if x == px[k]:
        return py[k]
    if x == px[k + 1]:
        return py[k + 1]
    return _hermite(px[k], px[k + 1], py[k], py[k + 1], slopes[k], slopes[k + 1], x)


def evaluate_curve(xs: Sequence[float], ys: Sequence[float], x: float) -> CurveEstimate:
    """Evaluate a constraint curve, converting failures into a diagnostic."""
    if x is None or not math.isfinite(x):
        return CurveEstimate(diagnostic="query point is missing")
    px, _ = _valid_points(xs, ys)
    if len(px) < 2:
        return CurveEstimate(diagnostic=f"only {len(px)} valid sample(s); need at least 2")
    if any(px[i + 1] <= px[i] for i in range(len(px) - 1)):
        return CurveEstimate(diagnostic="samples are not strictly increasing in W/S")
    value = pchip(xs, ys, x)
    if value is None or not math.isfinite(value):
        return CurveEstimate(diagnostic="interpolated value is not finite")
    return CurveEstimate(value=value)
