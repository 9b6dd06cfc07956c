from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

_E10 = math.sqrt(50.0)
_E5 = math.sqrt(10.0)
_E2 = math.sqrt(2.0)


def tick_increment(start: float, stop: float, count: int) -> float:
    """Round step for ``count`` ticks; negative values encode ``1 / step``."""
    if count <= 0:
        return 0.0
    step = (stop - start) / count
    if not math.isfinite(step) or step <= 0:
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10.0**power
    if error >= _E10:
        factor = 10.0
    elif error >= _E5:
        factor = 5.0
    elif error >= _E2:
        factor = 2.0
    else:
        factor = 1.0
    if power >= 0:
        return factor * 10.0**power
    return -(10.0 ** (-power)) / factor


@dataclass(frozen=True)
class BandScale:
    """Ordered categories laid out as equal-width slots across a pixel range.

    ``padding`` is used for both the gaps between slots and the outer gaps,
    and the slots are centered in the range.
    """

    domain: tuple[str, ...]
    range: tuple[float, float]
    padding: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.padding < 1.0:
            raise ValueError(f"padding must be in [0, 1), got {self.padding!r}.")
        unique = tuple(dict.fromkeys(str(value) for value in self.domain))
        object.__setattr__(self, "domain", unique)
        object.__setattr__(self, "range", (float(self.range[0]), float(self.range[1])))

    @property
    def step(self) -> float:
        start, stop = self.range
        n = len(self.domain)
        return (stop - start) / max(1.0, n - self.padding + 2.0 * self.padding)

    @property
    def bandwidth(self) -> float:
        return self.step * (1.0 - self.padding)

    @property
    def _origin(self) -> float:
        start, stop = self.range
        n = len(self.domain)
        return start + (stop - start - self.step * (n - self.padding)) * 0.5

    def __call__(self, value: str) -> float | None:
        try:
            index = self.domain.index(str(value))
        except ValueError:
            return None
        return self._origin + self.step * index

    def center(self, value: str) -> float | None:
        position = self(value)
        return None if position is None else position + self.bandwidth / 2.0

    def locate(self, pixel: float) -> str | None:
        """Category whose slot (bandwidth, not padding) contains ``pixel``."""
        for value in self.domain:
            position = self(value)
            if position is not None and position <= pixel < position + self.bandwidth:
                return value
        return None


@dataclass(frozen=True)
class LinearScale:
    domain: tuple[float, float]
    range: tuple[float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", (float(self.domain[0]), float(self.domain[1])))
        object.__setattr__(self, "range", (float(self.range[0]), float(self.range[1])))

    @property
    def is_degenerate(self) -> bool:
        low, high = self.domain
        return not (math.isfinite(low) and math.isfinite(high)) or low == high

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        if self.is_degenerate or not math.isfinite(value):
            return r0
        d0, d1 = self.domain
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r0 == r1 or self.is_degenerate:
            return d0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def nice(self, count: int = 10) -> LinearScale:
        """Extend the domain outward to round tick boundaries."""
        start, stop = self.domain
        if self.is_degenerate:
            return self
        reverse = stop < start
        if reverse:
            start, stop = stop, start
        previous: float | None = None
        for _ in range(10):
            step = tick_increment(start, stop, count)
            if step == previous:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            previous = step
        # Adding 0.0 normalizes a -0.0 produced by the reciprocal branch.
        start, stop = start + 0.0, stop + 0.0
        domain = (stop, start) if reverse else (start, stop)
        return LinearScale(domain=domain, range=self.range)

    def ticks(self, count: int = 10) -> list[float]:
        start, stop = sorted(self.domain)
        if self.is_degenerate:
            return [start] if math.isfinite(start) else []
        step = tick_increment(start, stop, count)
        if step > 0:
            first, last = math.ceil(start / step), math.floor(stop / step)
            return [index * step for index in range(first, last + 1)]
        if step < 0:
            first, last = math.ceil(start * -step), math.floor(stop * -step)
            return [index / -step for index in range(first, last + 1)]
        return []


def band_scale(domain: Sequence[str], width: float, padding: float) -> BandScale:
    return BandScale(domain=tuple(domain), range=(0.0, float(width)), padding=padding)


def count_scale(max_value: float, height: float) -> LinearScale:
    """Vertical scale from zero to ``max_value`` with zero at the bottom."""
    upper = float(max_value) if max_value and math.isfinite(max_value) else 1.0
    return LinearScale(domain=(0.0, upper), range=(float(height), 0.0)).nice()
