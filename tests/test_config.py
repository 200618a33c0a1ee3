from utils.config import load_config


def test_load_config_creates_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    cfg = load_config()
    assert cfg.data_dir.exists()
    assert cfg.data_dir == (tmp_path / "data").resolve()


def test_load_config_pacing_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.delenv("PACING_LOCALE", raising=False)
    monkeypatch.delenv("PACING_RESAMPLE_STEP_M", raising=False)
    monkeypatch.delenv("PACING_SMOOTHING_WINDOW", raising=False)
    cfg = load_config()
    assert cfg.locale == "fr_FR"
    assert cfg.resample_step_m == 250.0
    assert cfg.smoothing_window == 9


def test_load_config_overrides_and_invalid_values(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PACING_LOCALE", "en_US")
    monkeypatch.setenv("PACING_RESAMPLE_STEP_M", "100")
    monkeypatch.setenv("PACING_SMOOTHING_WINDOW", "five")
    cfg = load_config()
    assert cfg.locale == "en_US"
    assert cfg.resample_step_m == 100.0
    assert cfg.smoothing_window == 9
