import csv

import pytest

from logspark import (
    DirectorySink,
    EngineFinalized,
    MemorySink,
    PartitionOverflow,
    PartitionWriter,
)


def test_partition_sample_by_status(sample_records):
    writer = PartitionWriter()
    for record in sample_records:
        writer.add(record)
    partitions = writer.finalize()

    assert list(partitions) == [200, 404, 500]
    assert {k: len(v) for k, v in partitions.items()} == {200: 2, 404: 2, 500: 1}
    assert writer.columns == ("ip", "timestamp", "url", "user_agent")
    assert partitions[500] == [
        ("192.168.1.3", "2024-02-17 10:02:00", "/checkout", "Safari/14.0")
    ]
    for rows in partitions.values():
        assert all(len(row) == 4 for row in rows)


def test_assign(sample_records):
    assert PartitionWriter().assign(sample_records[1]) == 404
    assert PartitionWriter("url").assign(sample_records[1]) == "/products"


def test_overflow(sample_records):
    writer = PartitionWriter("ip", max_partitions=2)
    writer.add(sample_records[0])
    writer.add(sample_records[1])
    with pytest.raises(PartitionOverflow) as exc:
        writer.add(sample_records[2])
    assert exc.value.limit == 2
    assert exc.value.key == "192.168.1.3"
    assert len(writer) == 2


def test_existing_key_does_not_overflow(sample_records):
    writer = PartitionWriter(max_partitions=1)
    writer.add(sample_records[0])
    writer.add(sample_records[4])
    assert len(writer.finalize()[200]) == 2


def test_add_after_finalize(sample_records):
    writer = PartitionWriter()
    writer.finalize()
    with pytest.raises(EngineFinalized):
        writer.add(sample_records[0])


def test_invalid_arguments():
    with pytest.raises(ValueError):
        PartitionWriter("method")
    with pytest.raises(ValueError):
        PartitionWriter(max_partitions=0)


def test_merge_keeps_chunk_order(sample_records):
    first, second = PartitionWriter(), PartitionWriter()
    for record in sample_records[:3]:
        first.add(record)
    for record in sample_records[3:]:
        second.add(record)
    partitions = first.merge(second).finalize()
    assert [row[0] for row in partitions[200]] == ["192.168.1.1", "192.168.1.5"]
    assert [row[0] for row in partitions[404]] == ["192.168.1.2", "192.168.1.4"]


def test_merge_checks_limit(sample_records):
    first = PartitionWriter(max_partitions=2)
    second = PartitionWriter(max_partitions=2)
    for record in sample_records[:2]:
        first.add(record)
    second.add(sample_records[2])
    with pytest.raises(PartitionOverflow):
        first.merge(second)


def test_write_to_memory_sink(sample_records):
    writer = PartitionWriter()
    for record in sample_records:
        writer.add(record)
    sink = MemorySink()
    writer.write(sink)
    assert sink.columns == ("ip", "timestamp", "url", "user_agent")
    assert set(sink.partitions) == {200, 404, 500}


def test_directory_sink(tmp_path, sample_records):
    writer = PartitionWriter()
    for record in sample_records:
        writer.add(record)
    writer.write(DirectorySink(str(tmp_path)))

    path = tmp_path / "status=404" / "part-00000.csv"
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows == [
        ["192.168.1.2", "2024-02-17 10:01:00", "/products", "Chrome/90.0"],
        ["192.168.1.4", "2024-02-17 10:03:00", "/home", "Mozilla/5.0"],
    ]
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "status=200",
        "status=404",
        "status=500",
    ]


def test_directory_sink_escapes_keys(tmp_path):
    sink = DirectorySink(str(tmp_path), column="url", header=True)
    sink.write("/home", ("ip",), [("1.1.1.1",)])
    path = tmp_path / "url=%2Fhome" / "part-00000.csv"
    assert path.read_text().splitlines() == ["ip", "1.1.1.1"]
