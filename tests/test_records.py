import pytest

from logspark import FIELDS, AnalysisConfig, LogRecord, minute_key


def make_record(**overrides):
    values = dict(
        ip="10.0.0.1",
        timestamp="2024-02-17 10:01:59",
        url="/home",
        status=200,
        user_agent="curl/8.0",
    )
    values.update(overrides)
    return LogRecord(**values)


def test_minute_key_is_prefix_cut():
    assert minute_key("2024-02-17 10:01:59") == "2024-02-17 10:01"
    assert make_record().minute_key == "2024-02-17 10:01"


def test_record_is_immutable():
    record = make_record()
    with pytest.raises(AttributeError):
        record.status = 500


def test_row_excludes_columns():
    record = make_record()
    assert record.row() == ("10.0.0.1", "2024-02-17 10:01:59", "/home", 200, "curl/8.0")
    assert record.row(exclude=("status",)) == (
        "10.0.0.1",
        "2024-02-17 10:01:59",
        "/home",
        "curl/8.0",
    )


def test_get_unknown_column():
    with pytest.raises(ValueError, match="Unknown column"):
        make_record().get("method")
    assert make_record().get("status") == 200


def test_fields_order():
    assert FIELDS == ("ip", "timestamp", "url", "status", "user_agent")


class TestAnalysisConfig:
    def test_defaults(self):
        config = AnalysisConfig()
        assert config.top_k == 3
        assert config.failure_threshold == 3
        assert config.failure_statuses == frozenset({404, 500})
        assert config.max_partitions == 1000
        assert config.partition_column == "status"

    def test_failure_statuses_normalised(self):
        config = AnalysisConfig(failure_statuses={401, 403})
        assert isinstance(config.failure_statuses, frozenset)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"top_k": 0},
            {"failure_threshold": -1},
            {"failure_statuses": frozenset()},
            {"failure_statuses": frozenset({42})},
            {"max_partitions": 0},
            {"partition_column": "method"},
            {"delimiter": "||"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)
