"""A single recording session and its XML document form."""

from __future__ import annotations

import base64
import logging
import re
import threading
import uuid
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional
from uuid import UUID

from ..store.base import CaptureStore, StoreIOError
from .models import CaptureDescription, Sample

logger = logging.getLogger(__name__)

# Characters XML 1.0 element text carries unchanged; "\r" is normalized by parsers.
_TEXT_UNSAFE = re.compile(
    "[^\t\n\x20-%s%s-%s%s-%s]" % (chr(0xD7FF), chr(0xE000), chr(0xFFFD), chr(0x10000), chr(0x10FFFF))
)
BASE64_ENCODING = "base64"


class CaptureFinalizedError(RuntimeError):
    """Raised when a saved capture is asked to take more samples."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_sensor_name(name: str) -> None:
    if _TEXT_UNSAFE.search(name):
        raise ValueError(f"Sensor name {name!r} contains characters a capture document cannot hold")


def _write_value(el: ET.Element, raw: str) -> None:
    if _TEXT_UNSAFE.search(raw):
        el.set("encoding", BASE64_ENCODING)
        el.text = base64.b64encode(raw.encode("utf-8", "surrogatepass")).decode("ascii")
    else:
        el.text = raw


def _read_value(el: ET.Element) -> str:
    text = el.text or ""
    encoding = el.get("encoding")
    if encoding is None:
        return text
    if encoding != BASE64_ENCODING:
        raise ValueError(f"Unknown value encoding {encoding!r}")
    return base64.b64decode(text, validate=True).decode("utf-8", "surrogatepass")


class Capture:
    """
    Samples of a set of named sensors taken at a fixed frequency.

    A capture is mutable through :meth:`add_sample` until :meth:`save` is
    called, after which it is read-only. Persisted samples do not store their
    timestamps: they are derived from ``created_time + index / frequency``.
    Only the most recent sample keeps its wall-clock time in the document.
    """

    def __init__(
        self,
        frequency: float,
        store: CaptureStore,
        sensor_types: Mapping[str, UUID],
        *,
        capture_id: Optional[UUID] = None,
        created_time: Optional[datetime] = None,
    ) -> None:
        if frequency <= 0:
            raise ValueError(f"frequency must be positive, got {frequency}")
        self.id: UUID = capture_id or uuid.uuid4()
        self.frequency = float(frequency)
        self.created_time = created_time or _utcnow()
        self.store = store
        for name in sensor_types:
            _check_sensor_name(name)
        self._types = dict(sensor_types)
        self._samples: List[Sample] = []
        self._finalized = False
        self._indexed = False
        self._lock = threading.Lock()

    @classmethod
    def open(cls, store: CaptureStore, location: UUID) -> "Capture":
        """Load the capture stored at ``location``."""
        description = store.get_capture_description(location)
        capture = cls(
            description.frequency if description else 1.0,
            store,
            {},
            capture_id=location,
            created_time=description.created_time if description else None,
        )
        capture.load()
        capture._indexed = description is not None
        return capture

    # ------------------------------------------------------------------ views
    @property
    def finalized(self) -> bool:
        return self._finalized

    def get_samples(self) -> tuple[Sample, ...]:
        with self._lock:
            return tuple(self._samples)

    def get_sensor_names(self) -> frozenset[str]:
        return frozenset(self._types)

    def get_sensor_types(self) -> Mapping[str, UUID]:
        return MappingProxyType(self._types)

    def get_sample_count(self) -> int:
        with self._lock:
            return len(self._samples)

    def description(self) -> CaptureDescription:
        return CaptureDescription(
            location=self.id,
            created_time=self.created_time,
            frequency=self.frequency,
        )

    def sample_time(self, index: int) -> datetime:
        """Nominal timestamp of the sample at ``index``."""
        return self.created_time + timedelta(seconds=index / self.frequency)

    # ------------------------------------------------------------------ mutation
    def add_sample(self, values: Mapping[str, str]) -> Sample:
        """
        Append a sample stamped with the current wall-clock time.

        Any string value is accepted; sensor names must be representable in
        the capture document.
        """
        for name in values:
            _check_sensor_name(name)
        with self._lock:
            if self._finalized:
                raise CaptureFinalizedError(f"Capture {self.id} has been saved and cannot take samples.")
            sample = Sample(len(self._samples), _utcnow(), values)
            self._samples.append(sample)
        return sample

    def save(self) -> None:
        """
        Write the capture document under :attr:`id` and index it.

        The blob is written before the index entry; if indexing fails the
        blob is still reachable by key.
        """
        with self._lock:
            self._finalized = True
            document = self.to_xml()
        self.store.write(self.id, document)
        if not self._indexed:
            self.store.add_capture_description(self.description())
            self._indexed = True
        logger.info("Saved capture %s with %d samples", self.id, len(self._samples))

    def load(self) -> None:
        """Replace this capture's contents with the document stored at :attr:`id`."""
        document = self.store.read(self.id)
        if document is None:
            raise StoreIOError(f"No capture stored at {self.id}.")
        try:
            self.read_from(document)
        except (ET.ParseError, KeyError, ValueError) as exc:
            logger.error("Exception while loading capture %s: %s", self.id, exc)
            raise StoreIOError(f"Malformed capture document at {self.id}.") from exc
        self._finalized = True

    # ------------------------------------------------------------------ document
    def to_xml(self) -> str:
        root = ET.Element(
            "capture",
            {
                "frequency": repr(self.frequency),
                "createdTime": self.created_time.isoformat(),
            },
        )
        sensors = ET.SubElement(root, "sensors")
        for name in sorted(self._types):
            ET.SubElement(sensors, "sensor", {"name": name, "type": str(self._types[name])})

        samples = ET.SubElement(root, "samples")
        last = len(self._samples) - 1
        for sample in self._samples:
            el = ET.SubElement(samples, "sample")
            if sample.index == last:
                el.set("time", sample.timestamp.isoformat())
            for name, raw in sample.values.items():
                value = ET.SubElement(el, "value", {"sensor": name})
                _write_value(value, raw)
        return ET.tostring(root, encoding="unicode")

    def read_from(self, document: str) -> None:
        root = ET.fromstring(document)
        if root.tag != "capture":
            raise ValueError(f"Expected <capture> root, got <{root.tag}>")
        frequency = float(root.attrib["frequency"])
        if frequency <= 0:
            raise ValueError(f"frequency must be positive, got {frequency}")
        created = datetime.fromisoformat(root.attrib["createdTime"])

        types = {}
        sensors = root.find("sensors")
        if sensors is not None:
            for el in sensors.iter("sensor"):
                types[el.attrib["name"]] = UUID(el.attrib["type"])

        with self._lock:
            self.frequency = frequency
            self.created_time = created
            self._types = types
            self._samples = []
        samples = root.find("samples")
        if samples is not None:
            self.read_samples(iter(samples))

    def read_samples(self, elements: Iterable[ET.Element]) -> int:
        """
        Append samples from ``elements`` until a non-``sample`` element or the end.

        ``elements`` may be an iterator positioned anywhere, so parsing can
        resume at the first ``sample`` element. Returns the number read.
        """
        count = 0
        with self._lock:
            for el in elements:
                if el.tag != "sample":
                    break
                index = len(self._samples)
                stamp = el.get("time")
                when = datetime.fromisoformat(stamp) if stamp else self.sample_time(index)
                values = {v.attrib["sensor"]: _read_value(v) for v in el.iter("value")}
                self._samples.append(Sample(index, when, values))
                count += 1
        return count
