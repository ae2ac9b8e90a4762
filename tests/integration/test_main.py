import json

import pytest

import main


def test_main_runs_all_combinations(tmp_path, monkeypatch, capsys):
    output_dir = tmp_path / "results"
    monkeypatch.setenv("DISKIO_PATH", str(tmp_path / "data"))
    monkeypatch.setenv("DISKIO_BLOCK_SIZE", "256..1K")
    monkeypatch.setenv("DISKIO_DATA_SIZE", "8K")
    monkeypatch.setenv("DISKIO_OUTPUT_DIR", str(output_dir))
    monkeypatch.delenv("DISKIO_WRITERS", raising=False)
    monkeypatch.delenv("DISKIO_DURATION", raising=False)
    monkeypatch.delenv("DISKIO_KEEP_FILES", raising=False)

    main.main()

    out = capsys.readouterr().out
    assert "[2/2]" in out
    assert "BENCHMARK COMPLETED" in out

    raw_files = list(output_dir.glob("benchmark_raw_*.json"))
    assert len(raw_files) == 1
    results = json.loads(raw_files[0].read_text(encoding="utf-8"))["results"]
    assert [r["block_size"] for r in results] == [256, 512]
    assert [r["iterations"] for r in results] == [32, 16]
    assert len(list(output_dir.glob("benchmark_report_*.txt"))) == 1


def test_main_rejects_missing_path(monkeypatch):
    monkeypatch.delenv("DISKIO_PATH", raising=False)
    with pytest.raises(SystemExit) as exc_info:
        main.main()
    assert exc_info.value.code == 2


@pytest.mark.parametrize("name, value", [
    ("DISKIO_BLOCK_SIZE", "0"),
    ("DISKIO_DURATION", "-1"),
])
def test_main_rejects_invalid_settings(tmp_path, monkeypatch, name, value):
    monkeypatch.setenv("DISKIO_PATH", str(tmp_path / "data"))
    monkeypatch.setenv("DISKIO_DATA_SIZE", "8K")
    monkeypatch.setenv(name, value)
    with pytest.raises(SystemExit) as exc_info:
        main.main()
    assert exc_info.value.code == 2
    assert not (tmp_path / "data").exists()
