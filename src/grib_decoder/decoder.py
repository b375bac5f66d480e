"""
Decode pipeline entry point.

raw bytes -> gzip unwrap -> magic check -> section walk -> grid definition
+ sample codes -> coordinates -> budget sampling -> DecodedGrid

Malformed or unsupported input never raises out of ``decode``: every
GribDecodeError diverts to the synthetic fallback field and the result is
flagged with ``is_synthetic_fallback``.
"""

import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from .constants import DEFAULT_POINT_BUDGET, DEFAULT_VALUE_RANGE, FALLBACK_SEED
from .coordinates import grid_to_latlon_arrays, in_bounds_mask
from .decompress import decompress, is_gzip
from .errors import GribDecodeError
from .fallback import FallbackGenerator
from .grid import GridDefinition, parse_grid_definition
from .points import DecodedGrid, DecodeEvent, RadarDataPoint
from .sampler import cap_indices, cap_points, grid_strides, sample_grid_indices
from .samples import codes_to_dbz, read_sample_codes, valid_code_mask
from .sections import Section, check_magic, find_grid_sections

logger = logging.getLogger(__name__)

EventCallback = Callable[[DecodeEvent], None]


class _EventSink:
    """Collects diagnostics for one decode call and forwards them."""

    def __init__(self, callback: Optional[EventCallback] = None):
        self.events: List[DecodeEvent] = []
        self.callback = callback

    def emit(self, stage: str, message: str, **details) -> None:
        event = DecodeEvent(stage=stage, message=message, details=details)
        self.events.append(event)
        logger.debug(f"[{stage}] {message}")
        if self.callback is not None:
            self.callback(event)


def _assemble_points(
    grid: GridDefinition,
    data_section: Section,
    point_budget: int,
    value_range: Optional[Tuple[float, float]],
    sink: _EventSink
) -> List[RadarDataPoint]:
    """Sample, convert, georeference and filter the data section."""
    n_rows, n_cols = grid.shape
    codes = read_sample_codes(data_section, grid.n_points())
    sink.emit("samples", f"{codes.size:,} of {grid.n_points():,} codes available",
              available=int(codes.size), expected=grid.n_points())

    row_stride, col_stride = grid_strides(n_rows, n_cols, point_budget)
    rows, cols = sample_grid_indices(n_rows, n_cols, point_budget)

    # Drop whole rows (columns) past the available codes first so the flat
    # index stays within int64 for any u32 grid counts
    last = codes.size - 1
    if grid.scan_flags.consecutive_points_axis:
        present = cols <= last // n_rows
        rows, cols = rows[present], cols[present]
        flat = cols * n_rows + rows
    else:
        present = rows <= last // n_cols
        rows, cols = rows[present], cols[present]
        flat = rows * n_cols + cols

    present = flat < codes.size
    rows, cols, flat = rows[present], cols[present], flat[present]

    sampled = codes[flat]
    values = codes_to_dbz(sampled)
    lats, lngs = grid_to_latlon_arrays(rows, cols, grid)

    keep = valid_code_mask(sampled) & in_bounds_mask(lats, lngs)
    if value_range is not None:
        vmin, vmax = value_range
        keep &= (values >= vmin) & (values <= vmax)

    selected = np.flatnonzero(keep)
    n_valid = selected.size
    selected = selected[cap_indices(n_valid, point_budget)]

    sink.emit("sampler", f"Kept {selected.size:,} of {n_valid:,} valid sampled cells",
              row_stride=row_stride, col_stride=col_stride,
              sampled=int(flat.size), valid=int(n_valid), emitted=int(selected.size))

    return [
        RadarDataPoint(lat=float(lats[i]), lng=float(lngs[i]), value=float(values[i]))
        for i in selected
    ]


def _fallback(
    error: GribDecodeError,
    point_budget: int,
    seed,
    sink: _EventSink
) -> DecodedGrid:
    name = type(error).__name__
    logger.warning(f"Decoding failed ({name}: {error}); using synthetic radar data")
    points = cap_points(FallbackGenerator(seed=seed).generate(), point_budget)
    sink.emit("fallback", f"Generated {len(points):,} synthetic points",
              error=name, reason=str(error), emitted=len(points))
    return DecodedGrid(
        points=points,
        is_synthetic_fallback=True,
        grid=None,
        failure=name,
        events=sink.events,
    )


def decode(
    buffer,
    *,
    point_budget: int = DEFAULT_POINT_BUDGET,
    value_range: Optional[Tuple[float, float]] = DEFAULT_VALUE_RANGE,
    seed=FALLBACK_SEED,
    on_event: Optional[EventCallback] = None
) -> DecodedGrid:
    """
    Decode a (possibly gzip-wrapped) GRIB2 reflectivity message.

    Parameters
    ----------
    buffer : bytes-like
        Raw message as fetched or uploaded. Never modified.
    point_budget : int, optional
        Upper bound on the number of emitted points (default: 20000)
    value_range : tuple of float or None, optional
        Inclusive dBZ window applied at output assembly
        (default: (-30.0, 80.0)). None keeps every non-missing value.
    seed : int, np.random.Generator or None, optional
        Seed for the synthetic fallback field
    on_event : callable, optional
        Receives each DecodeEvent as it is emitted

    Returns
    -------
    DecodedGrid
        Decoded points, or synthetic points with
        ``is_synthetic_fallback=True`` when the buffer cannot be decoded.

    Raises
    ------
    ValueError
        If ``point_budget`` is smaller than 1.

    Examples
    --------
    >>> result = decode(b"not a grib file")
    >>> result.is_synthetic_fallback, result.failure
    (True, 'InvalidFormatError')
    """
    if point_budget < 1:
        raise ValueError(f"Point budget must be at least 1, got {point_budget}")

    sink = _EventSink(on_event)
    try:
        wrapped = is_gzip(buffer)
        payload = decompress(buffer)
        sink.emit("decompress", "gzip stream inflated" if wrapped else "no compression wrapper",
                  compressed=wrapped, input_bytes=len(buffer), output_bytes=len(payload))

        check_magic(payload)
        grid_section, data_section = find_grid_sections(payload)
        sink.emit("sections", "Grid definition and data sections located",
                  grid_offset=grid_section.offset, grid_length=grid_section.length,
                  data_offset=data_section.offset, data_length=data_section.length)

        grid = parse_grid_definition(grid_section)
        sink.emit("grid", repr(grid), rows=grid.shape[0], cols=grid.shape[1],
                  scan_mode=grid.scan_flags.raw)

        points = _assemble_points(grid, data_section, point_budget, value_range, sink)
    except GribDecodeError as exc:
        return _fallback(exc, point_budget, seed, sink)

    logger.info(f"Decoded {len(points):,} radar points from {grid.shape[0]}x{grid.shape[1]} grid")
    return DecodedGrid(points=points, is_synthetic_fallback=False, grid=grid, events=sink.events)
