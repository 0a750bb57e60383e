from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from vizlab.config import ALL_CHART_NAMES, DATA_DIR_ENV, AppConfig, load_config


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    config_data = {
        "datasets": {
            "iris": "data/iris.csv",
            "car": "http://vis.lab.djosix.com:2024/data/car.data",
            "abalone": str(tmp_path / "elsewhere" / "abalone.data"),
        }
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")

    cfg = load_config(config_path)

    assert Path(cfg.datasets.iris) == (tmp_path / "data" / "iris.csv").resolve()
    assert cfg.datasets.car == "http://vis.lab.djosix.com:2024/data/car.data"
    assert Path(cfg.datasets.abalone) == tmp_path / "elsewhere" / "abalone.data"


def test_load_config_uses_env_data_dir(monkeypatch, tmp_path: Path) -> None:
    data_root = tmp_path / "shared"
    data_root.mkdir()
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config_path = config_dir / "config.yaml"
    config_path.write_text(yaml.safe_dump({"datasets": {"iris": "iris.csv"}}), encoding="utf-8")

    monkeypatch.setenv(DATA_DIR_ENV, str(data_root))
    cfg = load_config(config_path)

    assert Path(cfg.datasets.iris) == (data_root / "iris.csv").resolve()


def test_default_config_datasets_follow_env_data_dir(monkeypatch, tmp_path: Path) -> None:
    workspace = Path(__file__).resolve().parents[1]
    data_root = tmp_path / "shared_datasets"
    data_root.mkdir()

    monkeypatch.setenv(DATA_DIR_ENV, str(data_root))
    cfg = load_config(workspace / "configs" / "default.yaml")

    assert Path(cfg.datasets.iris) == (data_root / "iris.csv").resolve()
    assert Path(cfg.datasets.world_topology) == (data_root / "countries-110m.json").resolve()
    assert cfg.datasets.car.startswith("http://")


def test_data_dir_resolves_against_config_directory(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config_path = config_dir / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"data_dir": "../data", "datasets": {"iris": "iris.csv"}}),
        encoding="utf-8",
    )

    cfg = load_config(config_path)

    assert Path(cfg.data_dir) == (tmp_path / "data").resolve()
    assert Path(cfg.datasets.iris) == (tmp_path / "data" / "iris.csv").resolve()


def test_load_config_defaults_for_empty_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.charts == ALL_CHART_NAMES
    assert cfg.bar_race.top_n == 12
    assert cfg.choropleth.thresholds == [0.2, 0.4, 0.6, 0.8, 1.0, 1.2]
    assert cfg.horizon.years == [2017, 2018, 2019]
    assert cfg.outputs.tables_format == "csv"
    assert cfg.outputs.figure_dpi == 100


def test_default_config_file_is_valid(monkeypatch) -> None:
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    workspace = Path(__file__).resolve().parents[1]
    cfg = load_config(workspace / "configs" / "default.yaml")

    assert cfg.charts == ALL_CHART_NAMES
    assert cfg.datasets.house_sales.startswith("http://")
    assert Path(cfg.datasets.iris).is_absolute()


def test_config_rejects_unknown_sections_and_charts() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"report": {}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"charts": ["bar_race", "pie"]})


def test_config_rejects_bad_bounds() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"bar_race": {"top_n": 0}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"choropleth": {"min_year": 2024, "max_year": 2000}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"choropleth": {"thresholds": [0.4, 0.2]}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"outputs": {"tables_format": "xlsx"}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"outputs": {"figure_dpi": 0}})
