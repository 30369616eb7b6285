import pathlib
import sys
from uuid import UUID

import pytest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from capturepi.store.memory import MemoryStore  # noqa: E402

SENSOR_TYPE_UUID = UUID("3906c164-82c8-48f8-a154-a39a9d0269fa")
SENSOR_NAMES = ("Sensor One", "Sensor Two")


@pytest.fixture
def sensor_types():
    return {name: SENSOR_TYPE_UUID for name in SENSOR_NAMES}


@pytest.fixture
def memory_store():
    return MemoryStore(page_size=3)
