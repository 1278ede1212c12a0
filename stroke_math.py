from __future__ import annotations

from dataclasses import dataclass
import importlib.util
import logging
import math
from typing import Callable, List, Sequence

from stroke_geometry import Point
from stroke_backends import python_backend

_LOGGER = logging.getLogger(__name__)

_NUMBA_AVAILABLE = importlib.util.find_spec("numba") is not None
if _NUMBA_AVAILABLE:
    from stroke_backends import numba_backend

DEFAULT_LINE_WIDTH = 1.0
MAX_LINE_WIDTH = 1_000_000.0
NEUTRAL_WEIGHT = 0.5
DEFAULT_PRESSURE = 1.0


@dataclass(frozen=True)
class EngineTuning:
    """Heuristic constants of the curve engine.

    They tune visual fidelity only; every algorithm stays correct for any
    positive value.
    """

    feature_deviation_ratio: float = 0.25   # interpolator: corner detection vs. curve length
    max_feature_depth: int = 8              # interpolator: recursive split cap
    chord_ratio: float = 0.35               # sampler: unequal chord split threshold
    min_samples: int = 2
    max_samples: int = 32
    flatness_samples: int = 4               # sampler: polyline used to estimate length
    flat_turn: float = math.pi * 0.1
    low_turn: float = math.pi * 0.3
    mini_cross_turn: float = math.pi * 0.6
    sharp_turn: float = math.pi * 0.9
    low_density: float = 1.5
    high_density: float = 16.0
    mini_cross_ratio: float = 4.0
    intersection_tolerance: float = 1e-7
    lasso_flatness: int = 8                 # lasso: polygon points per segment
    snap_min_length_ratio: float = 0.01     # lasso snap: ignore pieces shorter than width * ratio


DEFAULT_TUNING = EngineTuning()


ContainmentKernel = Callable[[Sequence[Point], Sequence[Point]], List[bool]]


@dataclass(frozen=True)
class MathBackend:
    """Implementation of the batch even-odd containment test.

    ``points_in_polygon(polygon, points)`` treats ``polygon`` as closed from
    its last vertex back to the first and answers one flag per point.
    Lasso outlines are flattened once, then queried with every point that
    needs classifying.
    """

    name: str
    label: str
    available: bool
    points_in_polygon: ContainmentKernel


_BACKENDS: dict[str, MathBackend] = {}
_ACTIVE_BACKEND = "python"


def register_backend(backend: MathBackend) -> None:
    _BACKENDS[backend.name] = backend


def list_backends(*, available_only: bool = False) -> list[MathBackend]:
    backends = list(_BACKENDS.values())
    if available_only:
        backends = [b for b in backends if b.available]
    return sorted(backends, key=lambda b: b.name)


def get_backend_name() -> str:
    return _ACTIVE_BACKEND


def set_backend(name: str) -> None:
    backend = _BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unknown math backend: {name}")
    if not backend.available:
        raise ValueError(f"Math backend not available: {name}")
    global _ACTIVE_BACKEND
    _ACTIVE_BACKEND = backend.name
    _LOGGER.debug("math backend set to %s", backend.name)


def points_in_polygon(polygon: Sequence[Point], points: Sequence[Point]) -> List[bool]:
    """Even-odd containment of each point in the closed ``polygon``."""
    backend = _BACKENDS.get(_ACTIVE_BACKEND)
    if backend is None:
        raise ValueError(f"Unknown math backend: {_ACTIVE_BACKEND}")
    return backend.points_in_polygon(polygon, points)


def polygon_contains(polygon: Sequence[Point], p: Point) -> bool:
    return points_in_polygon(polygon, [p])[0]


register_backend(
    MathBackend(
        name="python",
        label="Python",
        available=True,
        points_in_polygon=python_backend.points_in_polygon,
    )
)
register_backend(
    MathBackend(
        name="numba",
        label="Numba",
        available=_NUMBA_AVAILABLE,
        points_in_polygon=(
            numba_backend.points_in_polygon if _NUMBA_AVAILABLE else python_backend.points_in_polygon
        ),
    )
)


__all__ = [
    "DEFAULT_LINE_WIDTH",
    "DEFAULT_PRESSURE",
    "DEFAULT_TUNING",
    "EngineTuning",
    "MAX_LINE_WIDTH",
    "ContainmentKernel",
    "MathBackend",
    "NEUTRAL_WEIGHT",
    "get_backend_name",
    "list_backends",
    "points_in_polygon",
    "polygon_contains",
    "register_backend",
    "set_backend",
]
