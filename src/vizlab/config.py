from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

ALL_CHART_NAMES = [
    "bar_race",
    "choropleth",
    "stacked_area",
    "scatter",
    "parallel",
    "correlation",
    "splom",
    "stacked_bar",
    "theme_river",
    "horizon",
    "sankey",
]

DATA_DIR_ENV = "VIZLAB_DATA_DIR"


class DatasetsConfig(BaseModel):
    co2_total: str = "data/Filtered_Annual_CO2_Emissions_From_1800.csv"
    co2_per_capita: str = "data/Filtered_CO2_Emissions_Per_Capita.csv"
    co2_per_gdp: str = "data/relevant_columns_with_co2_per_gdp.csv"
    world_topology: str = "data/countries-110m.json"
    co2_by_source: str = "data/co2-by-source.csv"
    iris: str = "data/iris.csv"
    abalone: str = "data/abalone.data"
    university_rankings: str = "data/TIMES_WorldUniversityRankings_2024.csv"
    house_sales: str = "data/ma_lga_12345.csv"
    air_pollution: str = "data/air-pollution.csv"
    car: str = "data/car.data"


class BarRaceConfig(BaseModel):
    top_n: int = Field(default=12, ge=1)
    interval_ms: int = Field(default=250, ge=1)


class ChoroplethConfig(BaseModel):
    start_year: int = 1820
    min_year: int = 1800
    max_year: int = 2023
    thresholds: list[float] = Field(default_factory=lambda: [0.2, 0.4, 0.6, 0.8, 1.0, 1.2])
    interval_ms: int = Field(default=300, ge=1)

    @model_validator(mode="after")
    def _check_years(self) -> "ChoroplethConfig":
        if self.min_year > self.max_year:
            raise ValueError("choropleth.min_year must be <= choropleth.max_year")
        if sorted(self.thresholds) != list(self.thresholds):
            raise ValueError("choropleth.thresholds must be ascending")
        return self


class StackedAreaConfig(BaseModel):
    min_year: int = 1750
    max_year: int = 2023
    fast_until_year: int = 1900
    fast_step: int = Field(default=5, ge=1)
    slow_step: int = Field(default=1, ge=1)
    fast_interval_ms: int = Field(default=100, ge=1)
    slow_interval_ms: int = Field(default=300, ge=1)


class ParallelConfig(BaseModel):
    width: float = Field(default=800.0, gt=0)
    height: float = Field(default=420.0, gt=0)


class SplomConfig(BaseModel):
    histogram_ticks: int = Field(default=12, ge=1)


class StackedBarConfig(BaseModel):
    min_display_count: int = Field(default=5, ge=1)
    score_max: float = Field(default=500.0, gt=0)


class HorizonConfig(BaseModel):
    bands: int = Field(default=4, ge=1)
    years: list[int] = Field(default_factory=lambda: [2017, 2018, 2019])
    hours_per_day: int = Field(default=24, ge=1)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"
    render_figures: bool = True
    figure_dpi: int = Field(default=100, ge=10)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    charts: list[str] = Field(default_factory=lambda: list(ALL_CHART_NAMES))
    data_dir: str = "."
    datasets: DatasetsConfig = Field(default_factory=DatasetsConfig)
    bar_race: BarRaceConfig = Field(default_factory=BarRaceConfig)
    choropleth: ChoroplethConfig = Field(default_factory=ChoroplethConfig)
    stacked_area: StackedAreaConfig = Field(default_factory=StackedAreaConfig)
    parallel: ParallelConfig = Field(default_factory=ParallelConfig)
    splom: SplomConfig = Field(default_factory=SplomConfig)
    stacked_bar: StackedBarConfig = Field(default_factory=StackedBarConfig)
    horizon: HorizonConfig = Field(default_factory=HorizonConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)

    @model_validator(mode="after")
    def _check_charts(self) -> "AppConfig":
        unknown = [name for name in self.charts if name not in ALL_CHART_NAMES]
        if unknown:
            raise ValueError(f"Unknown chart names in config: {', '.join(unknown)}")
        return self


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _resolve_location(location: str, base_dir: Path) -> str:
    if not location or is_remote(location):
        return location
    candidate = Path(location)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    env_data_dir = os.getenv(DATA_DIR_ENV)
    if env_data_dir:
        config.data_dir = str(Path(env_data_dir).resolve())
    else:
        config.data_dir = _resolve_location(config.data_dir, path.resolve().parent)
    base_dir = Path(config.data_dir)

    for field_name in DatasetsConfig.model_fields:
        location = getattr(config.datasets, field_name)
        setattr(config.datasets, field_name, _resolve_location(location, base_dir))
    return config
