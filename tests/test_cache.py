"""Tests for the device directory cache."""

from pytapohub import ChildDevice, DeviceDirectory, DeviceDirectoryCache

from fake_hub import FakeClock


def _directory(fetched_at):
    return DeviceDirectory(devices=(ChildDevice("a"),), fetched_at=fetched_at)


class TestDeviceDirectoryCache:
    """Tests for TTL handling and replacement."""

    def test_empty(self):
        cache = DeviceDirectoryCache(5, FakeClock())
        assert cache.get() is None
        assert cache.directory is None
        assert cache.age() is None

    def test_fresh_entry_returned(self):
        clock = FakeClock()
        cache = DeviceDirectoryCache(5, clock)
        directory = _directory(clock())
        cache.store(directory)

        clock.advance(4.9)
        assert cache.get() is directory

    def test_expired_at_ttl(self):
        clock = FakeClock()
        cache = DeviceDirectoryCache(5, clock)
        cache.store(_directory(clock()))

        clock.advance(5.0)
        assert cache.get() is None
        # Stale entry is still visible for diagnostics
        assert cache.directory is not None

    def test_age(self):
        clock = FakeClock()
        cache = DeviceDirectoryCache(5, clock)
        cache.store(_directory(clock()))
        clock.advance(2.5)
        assert cache.age() == 2.5

    def test_store_replaces_whole_entry(self):
        clock = FakeClock()
        cache = DeviceDirectoryCache(5, clock)
        first = _directory(clock())
        second = _directory(clock())
        cache.store(first)
        cache.store(second)
        assert cache.get() is second

    def test_invalidate(self):
        clock = FakeClock()
        cache = DeviceDirectoryCache(5, clock)
        cache.store(_directory(clock()))
        cache.invalidate()
        assert cache.get() is None
        assert cache.directory is None

    def test_default_ttl(self):
        assert DeviceDirectoryCache().ttl == 5.0
