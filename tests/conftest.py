import pytest


@pytest.fixture
def data_file(tmp_path):
    """Пустой небуферизованный файл для цикла записи."""
    with open(tmp_path / "flush.data", "xb", buffering=0) as f:
        yield f
