from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
import math
from typing import Callable, List, Optional, Sequence

from stroke_geometry import Point

Scalar = Callable[..., float]


def linear(f0: float, f1: float, t: float) -> float:
    return f0 * (1.0 - t) + f1 * t


def _hermite(f1: float, f2: float, m1: float, m2: float, t: float) -> float:
    t2 = t * t
    t3 = t2 * t
    return (
        (2.0 * t3 - 3.0 * t2 + 1.0) * f1
        + (t3 - 2.0 * t2 + t) * m1
        + (-2.0 * t3 + 3.0 * t2) * f2
        + (t3 - t2) * m2
    )


def spline(f0: float, f1: float, f2: float, f3: float, t: float) -> float:
    """Uniform Catmull-Rom value between ``f1`` and ``f2``."""
    return _hermite(f1, f2, (f2 - f0) * 0.5, (f3 - f1) * 0.5, t)


def first_spline(f1: float, f2: float, f3: float, t: float) -> float:
    return _hermite(f1, f2, f2 - f1, (f3 - f1) * 0.5, t)


def last_spline(f0: float, f1: float, f2: float, t: float) -> float:
    return _hermite(f1, f2, (f2 - f0) * 0.5, f2 - f1, t)


def _sign(x: float) -> float:
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def _secant(fa: float, fb: float, h: float) -> float:
    return (fb - fa) / h if h > 0 else 0.0


def _monotone_slope(s0: float, s1: float, h0: float, h1: float) -> float:
    if h0 + h1 <= 0:
        return 0.0
    p = (s0 * h1 + s1 * h0) / (h0 + h1)
    return (_sign(s0) + _sign(s1)) * min(abs(s0), abs(s1), 0.5 * abs(p))


@dataclass(frozen=True)
class Monospline:
    """Monotone cubic (Steffen) spline evaluated between the keys at ``x1`` and ``x2``.

    ``x0`` / ``x3`` are the neighbouring key times; they may be ``None`` for
    the first and last interval. ``t`` is the normalized position in
    ``[x1, x2]``.
    """

    x0: Optional[float]
    x1: float
    x2: float
    x3: Optional[float]
    t: float

    @classmethod
    def with_time(
        cls,
        x0: Optional[float],
        x1: float,
        x2: float,
        x3: Optional[float],
        time: float,
    ) -> "Monospline":
        h = x2 - x1
        t = 0.0 if h <= 0 else (time - x1) / h
        return cls(x0, x1, x2, x3, t)

    @property
    def h0(self) -> float:
        return 0.0 if self.x0 is None else self.x1 - self.x0

    @property
    def h1(self) -> float:
        return self.x2 - self.x1

    @property
    def h2(self) -> float:
        return 0.0 if self.x3 is None else self.x3 - self.x2

    def _value(self, f0: Optional[float], f1: float, f2: float, f3: Optional[float]) -> float:
        h0, h1, h2 = self.h0, self.h1, self.h2
        s1 = _secant(f1, f2, h1)
        if f0 is None:
            m1 = s1
        else:
            m1 = _monotone_slope(_secant(f0, f1, h0), s1, h0, h1)
        if f3 is None:
            m2 = s1
        else:
            m2 = _monotone_slope(s1, _secant(f2, f3, h2), h1, h2)
        return _hermite(f1, f2, m1 * h1, m2 * h1, self.t)

    def first(self, f1: float, f2: float, f3: float) -> float:
        return self._value(None, f1, f2, f3)

    def middle(self, f0: float, f1: float, f2: float, f3: float) -> float:
        return self._value(f0, f1, f2, f3)

    def last(self, f0: float, f1: float, f2: float) -> float:
        return self._value(f0, f1, f2, None)


def first_monospline(f1: float, f2: float, f3: float, ms: Monospline) -> float:
    return ms.first(f1, f2, f3)


def monospline(f0: float, f1: float, f2: float, f3: float, ms: Monospline) -> float:
    return ms.middle(f0, f1, f2, f3)


def last_monospline(f0: float, f1: float, f2: float, ms: Monospline) -> float:
    return ms.last(f0, f1, f2)


def point_with(scalar: Scalar, points: Sequence[Point]) -> Point:
    """Applies a scalar interpolation to each coordinate of ``points``."""
    return (scalar(*[p[0] for p in points]), scalar(*[p[1] for p in points]))


@dataclass(frozen=True)
class Key:
    value: float
    time: float


class Interpolation:
    """Keyed monotone interpolation of scalar values over time."""

    def __init__(self, keys: Sequence[Key]) -> None:
        self.keys: List[Key] = sorted(keys, key=lambda k: k.time)
        self._times = [k.time for k in self.keys]

    def mono_value(self, time: float) -> Optional[float]:
        keys = self.keys
        if not keys:
            return None
        if len(keys) == 1 or time <= keys[0].time:
            return keys[0].value
        if time >= keys[-1].time:
            return keys[-1].value
        i = bisect_right(self._times, time) - 1
        k1 = keys[i]
        k2 = keys[i + 1]
        k0: Optional[Key] = keys[i - 1] if i > 0 else None
        k3: Optional[Key] = keys[i + 2] if i + 2 < len(keys) else None
        ms = Monospline.with_time(
            None if k0 is None else k0.time,
            k1.time,
            k2.time,
            None if k3 is None else k3.time,
            time,
        )
        value = ms._value(
            None if k0 is None else k0.value,
            k1.value,
            k2.value,
            None if k3 is None else k3.value,
        )
        if math.isnan(value):
            return None
        return value

    def __len__(self) -> int:
        return len(self.keys)


__all__ = [
    "Interpolation",
    "Key",
    "Monospline",
    "first_monospline",
    "first_spline",
    "last_monospline",
    "last_spline",
    "linear",
    "monospline",
    "point_with",
    "spline",
]
