"""Pytest configuration for Tapo hub tests."""

import sys
from pathlib import Path

import pytest

# Make the package and the fake hub importable without installing
_tests_dir = Path(__file__).parent
sys.path.insert(0, str(_tests_dir.parent))
sys.path.insert(0, str(_tests_dir))

from fake_hub import FakeClock, FakeTapoHub, make_record, make_sensor_record  # noqa: E402

from pytapohub import TapoHub  # noqa: E402


@pytest.fixture
def clock():
    """Manually advanced clock for cache expiry."""
    return FakeClock()


@pytest.fixture
def fake_hub():
    """Fake hub with one S220 switch (off) and one T310 sensor."""
    return FakeTapoHub(
        [
            make_record("dev1", model="S220", nickname="Hall Light", device_on=False),
            make_sensor_record("dev2", nickname="Bedroom"),
        ]
    )


@pytest.fixture
def hub(fake_hub, clock):
    """TapoHub wired to the fake hub."""
    return TapoHub(
        " Me@Example.COM ",
        " secret ",
        " 192.168.1.50 ",
        fake_hub.factory,
        clock=clock,
    )
