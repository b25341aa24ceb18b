import json
import threading

import pytest

from logspark import MemorySink, Pipeline, PipelineAborted


def test_run_sample_file(sample_file):
    result = Pipeline(str(sample_file)).run()
    engine = result.engine
    assert engine.total_requests() == 5
    assert engine.skipped_lines() == 0
    assert engine.status_counts() == {200: 2, 404: 2, 500: 1}
    assert result.partitions is None
    assert result.report.total_requests == "Total Requests: 5"


def test_file_with_bom_and_stray_carriage_return(tmp_path, sample_lines):
    lines = list(sample_lines)
    lines.insert(3, "192.168.1.9,2024-02-17 10:05\r:00,/home,200,agent")
    path = tmp_path / "access_log.csv"
    path.write_bytes(("\r\n".join(lines) + "\r\n").encode("utf-8-sig"))

    result = Pipeline(str(path)).run()
    assert result.engine.total_requests() == 5
    # header is recognised despite the BOM; the stray \r costs one line, not two
    assert result.engine.skipped_lines() == 1


def test_header_only_skipped_on_first_line(sample_lines):
    header = sample_lines[0]
    result = Pipeline(sample_lines + [header]).run()
    assert result.engine.total_requests() == 5
    # a repeated header later in the file is just a bad line
    assert result.engine.skipped_lines() == 1


def test_input_without_header(sample_lines):
    result = Pipeline(sample_lines[1:]).run()
    assert result.engine.total_requests() == 5


def test_malformed_line_is_counted(sample_lines):
    lines = sample_lines[:3] + ["192.168.1.9,2024-02-17 10:05:00,/home"] + sample_lines[3:]
    result = Pipeline(lines).run()
    assert result.engine.total_requests() == 5
    assert result.engine.skipped_lines() == 1
    assert result.report.to_text().endswith("Skipped Lines: 1")


def test_builder_settings(sample_lines):
    pipeline = Pipeline(sample_lines).top_k(1).failure_threshold(0).failure_statuses(500)
    assert pipeline.config.top_k == 1
    result = pipeline.run()
    assert result.report.top_urls == "/home: 2"
    assert result.report.suspicious_ips == "192.168.1.3: 1 failed requests"


def test_builder_validation(sample_lines):
    with pytest.raises(ValueError):
        Pipeline(sample_lines).top_k(0)
    with pytest.raises(ValueError):
        Pipeline(sample_lines).failure_statuses()
    with pytest.raises(ValueError):
        Pipeline(sample_lines).parse("xml")
    with pytest.raises(ValueError):
        Pipeline(sample_lines).partition_by("method")


def test_partition_by_status(sample_lines):
    sink = MemorySink()
    result = Pipeline(sample_lines).partition_by("status", sink=sink).run()
    assert {k: len(v) for k, v in result.partitions.items()} == {200: 2, 404: 2, 500: 1}
    assert sink.partitions == result.partitions
    assert result.partition_error is None


def test_partition_overflow_keeps_report(sample_lines):
    result = Pipeline(sample_lines).max_partitions(2).partition_by("ip").run()
    assert result.partitions is None
    assert result.partition_error is not None
    assert result.partition_error.key == "192.168.1.3"
    assert result.engine.total_requests() == 5


def test_json_input(sample_records):
    lines = [
        json.dumps(
            {
                "ip": r.ip,
                "timestamp": r.timestamp,
                "url": r.url,
                "status": r.status,
                "user_agent": r.user_agent,
            }
        )
        for r in sample_records
    ]
    result = Pipeline(lines, format="json").run()
    assert result.engine.top_urls(3) == [("/home", 2), ("/products", 2), ("/checkout", 1)]


def test_cancel(sample_lines):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(PipelineAborted):
        Pipeline(sample_lines).run(cancel=cancel)


def test_run_parallel_matches_run(sample_file):
    lines = sample_file.read_text().splitlines()
    # enough lines to make chunks with ties spanning chunk boundaries
    lines += [line for line in lines[1:] for _ in range(3)]
    lines.insert(4, "garbage")

    sequential = Pipeline(lines).failure_threshold(0).partition_by().run()
    parallel = (
        Pipeline(lines)
        .failure_threshold(0)
        .partition_by()
        .run_parallel(workers=2, chunk_size=4)
    )
    assert parallel.report == sequential.report
    assert parallel.partitions == sequential.partitions
    assert parallel.engine.skipped_lines() == 1


def test_run_parallel_overflow(sample_lines):
    result = (
        Pipeline(sample_lines)
        .max_partitions(2)
        .partition_by("ip")
        .run_parallel(workers=2, chunk_size=2)
    )
    assert result.partitions is None
    assert isinstance(result.partition_error.limit, int)
    assert result.engine.total_requests() == 5


def test_run_parallel_empty_input():
    result = Pipeline([]).run_parallel(workers=1)
    assert result.engine.total_requests() == 0
