from pathlib import Path

from cronoimc.config import AppConfig, load_config
from cronoimc.config.settings import DEFAULT_DATA_DIR


def test_defaults_without_environment() -> None:
    config = load_config({})

    assert config == AppConfig()
    assert config.data_dir == DEFAULT_DATA_DIR
    assert config.log_dir == DEFAULT_DATA_DIR / "logs"
    assert config.tick_ms == 10
    assert config.storage_key == "last_bmi_result"


def test_environment_overrides(tmp_path) -> None:
    config = load_config(
        {
            "CRONOIMC_DATA_DIR": str(tmp_path / "data"),
            "CRONOIMC_LOG_LEVEL": " debug ",
        }
    )

    assert config.data_dir == tmp_path / "data"
    assert config.log_dir == tmp_path / "data" / "logs"
    assert config.log_level == "DEBUG"


def test_reads_process_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("CRONOIMC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CRONOIMC_LOG_DIR", str(tmp_path / "var-log"))

    config = load_config()

    assert config.data_dir == Path(tmp_path)
    assert config.log_dir == tmp_path / "var-log"
