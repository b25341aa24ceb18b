import pytest

from logspark import CSVHandler

HEADER = "ip,timestamp,url,status,user_agent"

SAMPLE_LINES = [
    "192.168.1.1,2024-02-17 10:00:00,/home,200,Mozilla/5.0",
    "192.168.1.2,2024-02-17 10:01:00,/products,404,Chrome/90.0",
    "192.168.1.3,2024-02-17 10:02:00,/checkout,500,Safari/14.0",
    "192.168.1.4,2024-02-17 10:03:00,/home,404,Mozilla/5.0",
    "192.168.1.5,2024-02-17 10:04:00,/products,200,Edge/91.0",
]


@pytest.fixture
def sample_lines():
    """Header plus the five worked-example records."""
    return [HEADER] + list(SAMPLE_LINES)


@pytest.fixture
def sample_records():
    handler = CSVHandler()
    return [handler.parse(line) for line in SAMPLE_LINES]


@pytest.fixture
def sample_file(tmp_path, sample_lines):
    path = tmp_path / "access_log.csv"
    path.write_text("\n".join(sample_lines) + "\n")
    return path
