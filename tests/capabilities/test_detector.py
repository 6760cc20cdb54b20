import pytest

from partitionkit.capabilities import (
    CapabilityCache,
    CapabilityDetector,
    ServerDialect,
    UnsupportedPartitioning,
    classify_version,
    parse_version,
)
from partitionkit.dialects import MySQLDialect


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("8.0.34", (8, 0, 34)),
        ("5.7.41-log", (5, 7, 41)),
        ("5.5.62-0ubuntu0.14.04.1", (5, 5, 62)),
        ("10.6.12-MariaDB-1:10.6.12+maria~ubu2004", (10, 6, 12)),
        ("unknown", ()),
    ],
)
def test_parse_version(raw, expected):
    assert parse_version(raw) == expected


@pytest.mark.parametrize(
    "version, dialect",
    [
        ((8, 0, 34), ServerDialect.MYSQL_NATIVE),
        ((5, 7, 0), ServerDialect.MYSQL_PLUGIN),
        ((5, 6), ServerDialect.MYSQL_PLUGIN),
        ((5, 5, 62), ServerDialect.MYSQL_LEGACY),
        ((5, 1, 73), ServerDialect.MYSQL_LEGACY),
        ((5, 0, 96), ServerDialect.MYSQL_UNSUPPORTED),
        ((), ServerDialect.MYSQL_UNSUPPORTED),
    ],
)
def test_classify_version(version, dialect):
    assert classify_version(version) is dialect


def test_postgres_is_always_supported_without_queries(postgres_adapter):
    detector = CapabilityDetector(postgres_adapter)
    assert detector.have_partitioning() is True
    assert detector.dialect() is ServerDialect.POSTGRES_DECLARATIVE
    assert postgres_adapter.version_calls == 0
    assert postgres_adapter.queries == []


def test_mysql_8_is_supported(make_adapter):
    adapter = make_adapter(MySQLDialect(), version="8.0.34")
    detector = CapabilityDetector(adapter)
    state = detector.state()
    assert state.supported and state.checked
    assert state.dialect is ServerDialect.MYSQL_NATIVE
    assert adapter.queries == []


def test_mysql_57_requires_partition_plugin(make_adapter):
    without_plugin = make_adapter(MySQLDialect(), version="5.7.0", plugins=["InnoDB"])
    assert CapabilityDetector(without_plugin).have_partitioning() is False

    with_plugin = make_adapter(MySQLDialect(), version="5.7.0", plugins=["InnoDB", "partition"])
    assert CapabilityDetector(with_plugin).have_partitioning() is True
    assert with_plugin.queries == [("SHOW PLUGINS", ())]


def test_mysql_55_requires_have_partitioning_variable(make_adapter):
    without_variable = make_adapter(MySQLDialect(), version="5.5.62")
    assert CapabilityDetector(without_variable).have_partitioning() is False

    with_variable = make_adapter(MySQLDialect(), version="5.5.62", variables=["have_partitioning"])
    assert CapabilityDetector(with_variable).have_partitioning() is True


def test_old_mysql_is_unsupported(make_adapter):
    adapter = make_adapter(MySQLDialect(), version="5.0.96")
    detector = CapabilityDetector(adapter)
    with pytest.raises(UnsupportedPartitioning):
        detector.assert_support()
    assert adapter.queries == []


def test_detection_is_memoized_until_reset(make_adapter):
    adapter = make_adapter(MySQLDialect(), version="5.7.0", plugins=["partition"])
    detector = CapabilityDetector(adapter)
    for _ in range(3):
        assert detector.have_partitioning()
    assert adapter.version_calls == 1
    assert len(adapter.queries) == 1

    detector.reset()
    adapter.plugins = []
    assert detector.have_partitioning() is False
    assert adapter.version_calls == 2


def test_shared_cache_is_reused_across_detectors(make_adapter):
    cache = CapabilityCache()
    first = make_adapter(MySQLDialect(), version="8.0.1")
    second = make_adapter(MySQLDialect(), version="5.0.1")
    assert CapabilityDetector(first, cache).have_partitioning()
    assert CapabilityDetector(second, cache).have_partitioning()
    assert second.version_calls == 0
