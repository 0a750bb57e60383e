from __future__ import annotations

from vizlab.charts.bar_race import BarRaceChart
from vizlab.charts.base import Chart
from vizlab.charts.choropleth import ChoroplethChart
from vizlab.charts.correlation import CorrelationChart
from vizlab.charts.horizon import HorizonChart
from vizlab.charts.parallel import ParallelChart
from vizlab.charts.sankey import SankeyChart
from vizlab.charts.scatter import ScatterChart
from vizlab.charts.splom import SplomChart
from vizlab.charts.stacked_area import StackedAreaChart
from vizlab.charts.stacked_bar import StackedBarChart
from vizlab.charts.theme_river import ThemeRiverChart
from vizlab.config import AppConfig

CHART_TYPES: dict[str, type[Chart]] = {
    chart_type.name: chart_type
    for chart_type in (
        BarRaceChart,
        ChoroplethChart,
        StackedAreaChart,
        ScatterChart,
        ParallelChart,
        CorrelationChart,
        SplomChart,
        StackedBarChart,
        ThemeRiverChart,
        HorizonChart,
        SankeyChart,
    )
}


def get_chart(name: str, config: AppConfig) -> Chart:
    chart_type = CHART_TYPES.get(name)
    if chart_type is None:
        raise ValueError(f"Unknown chart: {name}. Expected one of: {', '.join(CHART_TYPES)}")
    return chart_type(config)


def default_charts(config: AppConfig) -> list[Chart]:
    return [get_chart(name, config) for name in config.charts]
