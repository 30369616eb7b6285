"""Turn stored captures into arrays and CSV files for offline review."""

from __future__ import annotations

import csv
import math
from pathlib import Path
from typing import Any, Iterable, Sequence

import numpy as np

from ..core.capture import Capture
from ..sensors.base import XAxisReader, YAxisReader, ZAxisReader


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """Write a header row and all data rows to a CSV file, creating directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(headers)
        writer.writerows(rows)


def sample_offsets(capture: Capture) -> np.ndarray:
    """Seconds from ``created_time`` to each sample's timestamp."""
    start = capture.created_time
    return np.asarray(
        [(s.timestamp - start).total_seconds() for s in capture.get_samples()],
        dtype=np.float64,
    )


def axis_array(capture: Capture, decoder: object) -> np.ndarray:
    """
    Decode every sample with ``decoder`` into an ``(n, 3)`` array in g.

    Axes the decoder cannot read, and missing readings, are NaN.
    """
    samples = capture.get_samples()
    out = np.full((len(samples), 3), np.nan, dtype=np.float64)
    readers = (
        (0, "get_x_axis_g", XAxisReader),
        (1, "get_y_axis_g", YAxisReader),
        (2, "get_z_axis_g", ZAxisReader),
    )
    for column, method, capability in readers:
        if not isinstance(decoder, capability):
            continue
        read = getattr(decoder, method)
        for row, sample in enumerate(samples):
            value = read(sample)
            if value is not None:
                out[row, column] = value
    return out


def export_csv(capture: Capture, path: Path, sensor_names: Sequence[str] | None = None) -> Path:
    """Write ``index, t_s, <sensor>...`` rows for ``capture`` to ``path``."""
    names = list(sensor_names) if sensor_names is not None else sorted(capture.get_sensor_names())
    offsets = sample_offsets(capture)
    rows = []
    for sample, t_s in zip(capture.get_samples(), offsets):
        t = float(t_s)
        rows.append([sample.index, f"{t:.6f}" if math.isfinite(t) else ""] + [sample.get(n) or "" for n in names])
    write_rows(Path(path), ["index", "t_s", *names], rows)
    return Path(path)
