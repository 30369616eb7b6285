from __future__ import annotations

import csv
import uuid
from typing import Optional

import numpy as np
import pytest

from capturepi.core.capture import Capture
from capturepi.core.models import Sample
from capturepi.dataio.export import axis_array, export_csv, sample_offsets
from capturepi.sensors.accelerometer import AccelerometerMockDecoder, decoder_for
from capturepi.sensors.base import Decoder


class _XOnlyDecoder(Decoder):
    def get_x_axis_g(self, sample: Sample) -> Optional[float]:
        data = self.get_data(sample)
        return None if data is None else float(data)


def _loaded(store, sensor_types, readings):
    capture = Capture(10.0, store, sensor_types)
    for reading in readings:
        capture.add_sample({name: reading for name in sensor_types})
    capture.save()
    return Capture.open(store, capture.id)


def test_axis_array_decodes_three_axes(memory_store, sensor_types) -> None:
    capture = _loaded(memory_store, sensor_types, ["(0.1,-1.0,0.2)", "", "(1,2,3)"])
    decoder = decoder_for("Sensor One", next(iter(sensor_types.values())))
    assert isinstance(decoder, AccelerometerMockDecoder)

    data = axis_array(capture, decoder)

    assert data.shape == (3, 3)
    np.testing.assert_allclose(data[0], [0.1, -1.0, 0.2])
    assert np.isnan(data[1]).all()
    np.testing.assert_allclose(data[2], [1.0, 2.0, 3.0])


def test_axis_array_leaves_missing_capabilities_nan(memory_store, sensor_types) -> None:
    capture = _loaded(memory_store, sensor_types, ["0.5"])
    data = axis_array(capture, _XOnlyDecoder("Sensor One"))
    assert data[0, 0] == 0.5
    assert np.isnan(data[0, 1:]).all()


def test_unknown_decoder_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        decoder_for("Sensor One", uuid.uuid4())


def test_sample_offsets_follow_frequency(memory_store, sensor_types) -> None:
    capture = _loaded(memory_store, sensor_types, ["(0,0,0)"] * 4)
    offsets = sample_offsets(capture)
    np.testing.assert_allclose(offsets[:3], [0.0, 0.1, 0.2])


def test_export_csv_writes_header_and_rows(tmp_path, memory_store, sensor_types) -> None:
    capture = _loaded(memory_store, sensor_types, ["(0,0,1)", "(0,1,0)"])
    out = export_csv(capture, tmp_path / "out" / "capture.csv", sensor_names=["Sensor Two"])

    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))

    assert rows[0] == ["index", "t_s", "Sensor Two"]
    assert rows[1] == ["0", "0.000000", "(0,0,1)"]
    assert rows[2][0] == "1"
    assert rows[2][2] == "(0,1,0)"
    assert len(rows) == 3
