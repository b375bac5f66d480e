"""
Synthetic reflectivity field used when a message cannot be decoded.

The field mimics a handful of storms over the continental US: each storm is
a spiral of points whose intensity falls off with radius and oscillates in
bands, ringed by scattered light precipitation, on top of a sparse
background. All randomness comes from a seeded numpy Generator, so a given
seed always produces the same points.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import numpy as np

from .constants import (
    BACKGROUND_CANDIDATES,
    BACKGROUND_LAT,
    BACKGROUND_LNG,
    BACKGROUND_MAX_DBZ,
    BACKGROUND_MIN_DBZ,
    FALLBACK_SEED,
    SCATTER_DBZ,
    SCATTER_DISTANCE_DEG,
    SCATTER_POINTS_PER_STORM,
    SPIRAL_BAND_DBZ,
    SPIRAL_BAND_FREQ,
    SPIRAL_JITTER_DEG,
    SPIRAL_LAT_SQUASH,
    SPIRAL_MIN_DBZ,
    SPIRAL_MIN_POINTS,
    SPIRAL_NOISE_DBZ,
    SPIRAL_POINTS_PER_DEGREE,
    SPIRAL_RADIUS_STEP,
    SPIRAL_TWIST,
    STORM_SYSTEMS,
)
from .coordinates import in_bounds
from .points import RadarDataPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StormSystem:
    """A synthetic storm centre with peak intensity (dBZ) and radius (degrees)."""

    name: str
    lat: float
    lng: float
    intensity: float
    size: float

    def radii(self) -> np.ndarray:
        """Spiral radii 0, step, 2*step, ... up to and including ``size``."""
        n = int(math.floor(self.size / SPIRAL_RADIUS_STEP + 1e-9)) + 1
        return np.arange(n) * SPIRAL_RADIUS_STEP


DEFAULT_STORMS = tuple(StormSystem(**s) for s in STORM_SYSTEMS)


class FallbackGenerator:
    """
    Produce a plausible, non-empty synthetic point field.

    Parameters
    ----------
    seed : int, np.random.Generator or None
        Seed (or ready Generator) for every random draw. ``None`` gives a
        non-reproducible field.
    storms : iterable of StormSystem, optional
        Storm centres to render (default: six US storms)

    Examples
    --------
    >>> points = FallbackGenerator(seed=7).generate()
    >>> points == FallbackGenerator(seed=7).generate()
    True
    """

    def __init__(
        self,
        seed: Union[int, np.random.Generator, None] = FALLBACK_SEED,
        storms: Optional[Iterable[StormSystem]] = None
    ):
        if isinstance(seed, np.random.Generator):
            self.rng = seed
        else:
            self.rng = np.random.default_rng(seed)
        self.storms = tuple(storms) if storms is not None else DEFAULT_STORMS

    def _uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return low + (high - low) * float(self.rng.random())

    def _centered(self, width: float) -> float:
        """Uniform draw in [-width/2, width/2)."""
        return (float(self.rng.random()) - 0.5) * width

    def spiral(self, storm: StormSystem) -> List[RadarDataPoint]:
        """Spiral arms of a storm with radial falloff and banding."""
        points = []
        for r in storm.radii():
            r = float(r)
            n = max(SPIRAL_MIN_POINTS, int(math.floor(r * SPIRAL_POINTS_PER_DEGREE)))
            falloff = max(0.0, 1.0 - r / storm.size) if storm.size > 0 else 0.0
            band = math.sin(r * SPIRAL_BAND_FREQ) * SPIRAL_BAND_DBZ
            for i in range(n):
                angle = (i / n) * 2.0 * math.pi + r * SPIRAL_TWIST
                lat = storm.lat + r * math.cos(angle) * SPIRAL_LAT_SQUASH
                lng = storm.lng + r * math.sin(angle)

                intensity = max(0.0, storm.intensity * falloff + self._centered(SPIRAL_NOISE_DBZ))
                value = max(0.0, intensity + band)
                if value > SPIRAL_MIN_DBZ:
                    points.append(RadarDataPoint(
                        lat=lat + self._centered(SPIRAL_JITTER_DEG),
                        lng=lng + self._centered(SPIRAL_JITTER_DEG),
                        value=value,
                    ))
        return points

    def scatter(self, storm: StormSystem) -> List[RadarDataPoint]:
        """Light precipitation just outside a storm's radius."""
        points = []
        for _ in range(SCATTER_POINTS_PER_STORM):
            angle = self._uniform(0.0, 2.0 * math.pi)
            distance = storm.size + self._uniform(0.0, SCATTER_DISTANCE_DEG)
            points.append(RadarDataPoint(
                lat=storm.lat + distance * math.cos(angle),
                lng=storm.lng + distance * math.sin(angle),
                value=self._uniform(*SCATTER_DBZ),
            ))
        return points

    def background(self) -> List[RadarDataPoint]:
        """Sparse moderate precipitation across the continental US."""
        points = []
        for _ in range(BACKGROUND_CANDIDATES):
            lat = self._uniform(*BACKGROUND_LAT)
            lng = self._uniform(*BACKGROUND_LNG)
            value = self._uniform(0.0, BACKGROUND_MAX_DBZ)
            if value > BACKGROUND_MIN_DBZ:
                points.append(RadarDataPoint(lat=lat, lng=lng, value=value))
        return points

    def generate(self) -> List[RadarDataPoint]:
        """Render all storms and the background, dropping invalid coordinates."""
        points = []
        for storm in self.storms:
            points.extend(self.spiral(storm))
            points.extend(self.scatter(storm))
        points.extend(self.background())

        valid = [p for p in points if in_bounds(p.lat, p.lng)]
        logger.info(f"Generated {len(valid):,} synthetic radar points ({len(self.storms)} storms)")
        return valid
