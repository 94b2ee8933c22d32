"""
Multi-linear interpolation over regular lookup tables.

Absorber tables are dense arrays indexed by independent axes of differing
lengths (spectral coordinate, pressure proxy, temperature anomaly, ...).
``MultilinearTable`` wraps :class:`scipy.interpolate.RegularGridInterpolator`
and adds the edge policy used by the engine:

- ``clamp``: coordinates are clipped to the axis bounds and the event is
  counted (diagnostic flag) and logged once.
- ``extrapolate``: linear extrapolation from the edge cells (also counted).
- ``error``: an :class:`InterpolationRangeError` is raised.

Axes of length one carry no interpolation information and are dropped, so the
table degenerates to nearest-neighbour along them. Each evaluation costs
O(2^d) table lookups for the d remaining axes.
"""

import threading
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from specrad.core.exceptions import ConfigurationError, InterpolationRangeError
from specrad.core.logging_config import get_logger, warn_once

logger = get_logger("core.interpolation")


class OutOfRangePolicy(Enum):
    """Behaviour when a lookup coordinate falls outside the table."""

    CLAMP = "clamp"
    EXTRAPOLATE = "extrapolate"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Union[str, "OutOfRangePolicy"]) -> "OutOfRangePolicy":
        """Accept an enum member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"Unknown interpolation policy: {value}. Must be one of: {valid}"
            ) from None


class MultilinearTable:
    """
    Regular-grid lookup table with a configurable out-of-range policy.

    Parameters
    ----------
    axes : sequence of array
        Coordinate values of each axis; strictly monotonic (descending axes are
        flipped on construction)
    values : array
        Dense table with shape ``tuple(len(a) for a in axes)``
    names : sequence of str, optional
        Axis names used in diagnostics
    policy : OutOfRangePolicy or str
        Edge policy, default ``clamp``
    name : str
        Table name used in diagnostics
    """

    def __init__(
        self,
        axes: Sequence[np.ndarray],
        values: np.ndarray,
        names: Optional[Sequence[str]] = None,
        policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
        name: str = "table",
    ):
        values = np.array(values, dtype=float)
        axes = [np.array(a, dtype=float).ravel() for a in axes]

        if values.ndim != len(axes):
            raise ConfigurationError(
                f"{name}: table has {values.ndim} dimensions but {len(axes)} axes were given"
            )
        if names is None:
            names = [f"axis{i}" for i in range(len(axes))]
        if len(names) != len(axes):
            raise ConfigurationError(f"{name}: expected {len(axes)} axis names, got {len(names)}")
        if not np.all(np.isfinite(values)):
            raise ConfigurationError(f"{name}: table contains non-finite values")

        for i, axis in enumerate(axes):
            if axis.size == 0:
                raise ConfigurationError(f"{name}: axis '{names[i]}' is empty")
            if axis.size != values.shape[i]:
                raise ConfigurationError(
                    f"{name}: axis '{names[i]}' has {axis.size} points but the table "
                    f"extent along it is {values.shape[i]}"
                )
            if axis.size > 1:
                steps = np.diff(axis)
                if np.all(steps < 0):
                    axes[i] = axis[::-1]
                    values = np.flip(values, axis=i)
                elif not np.all(steps > 0):
                    raise ConfigurationError(
                        f"{name}: axis '{names[i]}' must be strictly monotonic"
                    )

        self.name = name
        self.names: List[str] = list(names)
        self.axes: List[np.ndarray] = axes
        self.values = values
        self.policy = OutOfRangePolicy.parse(policy)
        self.out_of_range_count = 0
        self._count_lock = threading.Lock()

        self._active = [i for i, a in enumerate(axes) if a.size > 1]
        self._lower = np.array([axes[i][0] for i in self._active])
        self._upper = np.array([axes[i][-1] for i in self._active])

        index = tuple(slice(None) if i in self._active else 0 for i in range(len(axes)))
        reduced = values[index]

        if self._active:
            self._interp: Optional[RegularGridInterpolator] = RegularGridInterpolator(
                tuple(axes[i] for i in self._active),
                reduced,
                method="linear",
                bounds_error=False,
                fill_value=None,
            )
            self._constant = None
        else:
            self._interp = None
            self._constant = float(reduced)

    @property
    def ndim(self) -> int:
        """Number of axes, including degenerate ones."""
        return len(self.axes)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.values.shape

    def bounds(self, axis: Union[int, str]) -> Tuple[float, float]:
        """(min, max) of an axis given by index or name."""
        if isinstance(axis, str):
            axis = self.names.index(axis)
        return float(self.axes[axis][0]), float(self.axes[axis][-1])

    def __call__(self, points: np.ndarray) -> np.ndarray:
        """
        Interpolate at one or many points.

        Parameters
        ----------
        points : array, shape (..., ndim)
            Coordinates ordered as the table axes

        Returns
        -------
        array, shape (...)
            Interpolated values
        """
        pts = np.asarray(points, dtype=float)
        if pts.ndim == 0 or pts.shape[-1] != self.ndim:
            raise ValueError(
                f"{self.name}: expected points with trailing dimension {self.ndim}, "
                f"got shape {pts.shape}"
            )
        batch_shape = pts.shape[:-1]

        if self._interp is None:
            return np.full(batch_shape, self._constant)

        pts = pts.reshape(-1, self.ndim)[:, self._active]
        outside = (pts < self._lower) | (pts > self._upper)
        if np.any(outside):
            self._handle_out_of_range(pts, outside)
            if self.policy is OutOfRangePolicy.CLAMP:
                pts = np.clip(pts, self._lower, self._upper)

        return self._interp(pts).reshape(batch_shape)

    def _handle_out_of_range(self, pts: np.ndarray, outside: np.ndarray) -> None:
        rows, cols = np.nonzero(outside)
        col = cols[0]
        axis = self._active[col]
        value = float(pts[rows[0], col])
        bounds = (float(self._lower[col]), float(self._upper[col]))

        if self.policy is OutOfRangePolicy.ERROR:
            raise InterpolationRangeError(self.names[axis], value, bounds)

        n_outside = int(np.count_nonzero(np.any(outside, axis=1)))
        with self._count_lock:
            self.out_of_range_count += n_outside
        action = "clamped" if self.policy is OutOfRangePolicy.CLAMP else "extrapolated"
        warn_once(
            logger,
            f"{self.name}:{id(self)}",
            f"{self.name}: {self.names[axis]}={value:.6g} outside [{bounds[0]:.6g}, "
            f"{bounds[1]:.6g}]; values are {action}",
        )
