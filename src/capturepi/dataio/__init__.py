"""Data export helpers: numpy arrays and CSV files built from captures."""

from .export import axis_array, export_csv, sample_offsets, write_rows

__all__ = ["axis_array", "export_csv", "sample_offsets", "write_rows"]
