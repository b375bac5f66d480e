"""
Output types of the decode pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .constants import SIGNIFICANT_DBZ
from .grid import GridDefinition


@dataclass(frozen=True)
class RadarDataPoint:
    """A geo-located reflectivity value (degrees, dBZ)."""

    lat: float
    lng: float
    value: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng, "value": self.value}


@dataclass(frozen=True)
class DecodeEvent:
    """
    Diagnostic event emitted by a pipeline stage.

    Attributes
    ----------
    stage : str
        Emitting stage ('decompress', 'sections', 'grid', 'samples',
        'sampler', 'fallback')
    message : str
        Human readable summary
    details : dict
        Structured values (sizes, counts, strides, error names)
    """

    stage: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DecodedGrid:
    """
    Result of decoding one buffer.

    Attributes
    ----------
    points : list of RadarDataPoint
        Emitted points, row-major order for real data
    is_synthetic_fallback : bool
        True when the points come from the synthetic generator
    grid : GridDefinition, optional
        Geometry of the decoded message (None on fallback)
    failure : str, optional
        Name of the error that triggered the fallback
    events : list of DecodeEvent
        Diagnostics collected during the call
    """

    points: List[RadarDataPoint]
    is_synthetic_fallback: bool = False
    grid: Optional[GridDefinition] = None
    failure: Optional[str] = None
    events: List[DecodeEvent] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[RadarDataPoint]:
        return iter(self.points)

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (lats, lngs, values) as float64 arrays."""
        if not self.points:
            empty = np.empty(0, dtype=np.float64)
            return empty, empty.copy(), empty.copy()
        arr = np.array([(p.lat, p.lng, p.value) for p in self.points], dtype=np.float64)
        return arr[:, 0], arr[:, 1], arr[:, 2]

    def to_records(self) -> List[Dict[str, float]]:
        return [p.to_dict() for p in self.points]

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Return (south, west, north, east) of the points, or None if empty."""
        if not self.points:
            return None
        lats, lngs, _ = self.to_arrays()
        return float(lats.min()), float(lngs.min()), float(lats.max()), float(lngs.max())

    def __repr__(self) -> str:
        source = "synthetic" if self.is_synthetic_fallback else "decoded"
        return f"DecodedGrid(n_points={len(self.points):,}, source={source}, failure={self.failure})"


def split_by_intensity(
    points: Sequence[RadarDataPoint],
    threshold: float = SIGNIFICANT_DBZ
) -> Tuple[List[RadarDataPoint], List[RadarDataPoint]]:
    """
    Split points into (significant, background) populations.

    Points with ``value >= threshold`` are significant. Order is preserved
    within each population.
    """
    significant = [p for p in points if p.value >= threshold]
    background = [p for p in points if p.value < threshold]
    return significant, background
