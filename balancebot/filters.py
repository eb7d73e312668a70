"""Simple digital filters for sensor signals."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Sequence


class FilterNull:
    """A filter that passes its input straight through."""

    def __init__(self) -> None:
        self._last = 0.0

    def reset(self) -> None:
        """Forget the last value passed through."""
        self._last = 0.0

    def update(self, value: float, dt: float | None = None) -> float:
        """Return the input unchanged; ``dt`` is ignored."""
        self._last = value
        return self._last


class FilterMovingAverage:
    """Simple moving average over the last ``size`` samples."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("moving average size must be at least 1")
        self._size = size
        self._samples: deque[float] = deque(maxlen=size)
        self._sum = 0.0

    def reset(self) -> None:
        self._samples.clear()
        self._sum = 0.0

    def update(self, value: float, dt: float | None = None) -> float:
        """Add a sample and return the current average; ``dt`` is ignored."""
        self._sum += value
        if len(self._samples) < self._size:
            self._samples.append(value)
            return self._sum / len(self._samples)
        self._sum -= self._samples[0]
        self._samples.append(value)
        return self._sum / self._size


class IIRFilter:
    """First-order infinite impulse response (exponential moving average) filter."""

    def __init__(self, frequency_cutoff: float = 0.0, dt: float | None = None) -> None:
        self._alpha = 0.0
        self._omega = 2.0 * math.pi * frequency_cutoff
        self._state = 0.0
        if dt is not None:
            self.set_cutoff_frequency(frequency_cutoff, dt)

    def set_cutoff_frequency(self, frequency_cutoff: float, dt: float) -> None:
        self._omega = 2.0 * math.pi * frequency_cutoff
        self._alpha = self._omega * dt / (self._omega * dt + 1.0)

    def set_alpha(self, alpha: float) -> None:
        self._alpha = alpha

    def reset(self) -> None:
        self._state = 0.0

    def update(self, value: float, dt: float | None = None) -> float:
        """Filter a sample; with ``dt`` the smoothing factor is derived from it."""
        if dt is None:
            alpha = self._alpha
        else:
            alpha = self._omega * dt / (self._omega * dt + 1.0)
        self._state += alpha * (value - self._state)
        return self._state


class FIRFilter:
    """Finite impulse response filter; the first coefficient weights the newest sample."""

    def __init__(self, coefficients: Sequence[float]) -> None:
        if not coefficients:
            raise ValueError("an FIR filter needs at least one coefficient")
        self._coefficients = tuple(coefficients)
        self._history: deque[float] = deque([0.0] * len(self._coefficients), maxlen=len(self._coefficients))

    def update(self, value: float) -> float:
        self._history.appendleft(value)
        return sum(c * x for c, x in zip(self._coefficients, self._history))


class ButterworthFilter:
    """Second-order IIR filter given by its difference-equation coefficients."""

    def __init__(self, a1: float, a2: float, b0: float, b1: float, b2: float) -> None:
        self._a1 = a1
        self._a2 = a2
        self._b0 = b0
        self._b1 = b1
        self._b2 = b2
        self.reset()

    def update(self, value: float) -> float:
        output = (
            self._b0 * value
            - self._a2 * self._y1
            + self._b1 * self._x0
            + self._b2 * self._x1
            - self._a1 * self._y0
        )
        self._y1 = self._y0
        self._y0 = output
        self._x1 = self._x0
        self._x0 = value
        return output

    def reset(self) -> None:
        self._x0 = 0.0
        self._x1 = 0.0
        self._y0 = 0.0
        self._y1 = 0.0