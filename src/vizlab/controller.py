from __future__ import annotations

import logging
import time
from typing import Any, Callable

from vizlab.charts.base import Chart, ViewModel
from vizlab.charts.events import Event, Tick, TogglePlay

LOGGER = logging.getLogger(__name__)

Loader = Callable[[Any], Any]
Renderer = Callable[[ViewModel], Any]


class PlaybackTimer:
    """Repeating timer that runs its ticks in the calling thread."""

    def __init__(self, interval: float, sleep: Callable[[float], Any] = time.sleep) -> None:
        self.interval = interval
        self._sleep = sleep
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self, on_tick: Callable[[], Any], max_ticks: int | None = None) -> int:
        self._cancelled = False
        ticks = 0
        while not self._cancelled and (max_ticks is None or ticks < max_ticks):
            self._sleep(self.interval)
            if self._cancelled:
                break
            on_tick()
            ticks += 1
        return ticks

    def cancel(self) -> None:
        self._cancelled = True


class ChartController:
    """Owns one chart's state: events go through its reducers, then transform, then render."""

    def __init__(
        self,
        chart: Chart,
        records: Any,
        state: Any = None,
        *,
        loader: Loader | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.chart = chart
        self._records = records
        self._state = state if state is not None else chart.initial_state(records)
        self._loader = loader
        self._renderer = renderer
        self._timer: PlaybackTimer | None = None

    @property
    def state(self) -> Any:
        return self._state

    @property
    def records(self) -> Any:
        return self._records

    def view(self) -> ViewModel:
        return self.chart.transform(self._records, self._state)

    def render(self) -> ViewModel:
        view_model = self.view()
        if self._renderer is not None:
            self._renderer(view_model)
        return view_model

    def dispatch(self, event: Event) -> ViewModel:
        new_state = self.chart.reduce(self._state, event, self._records)
        if self.chart.dataset_key(new_state) != self.chart.dataset_key(self._state):
            if self._loader is None:
                raise ValueError(f"{self.chart.name} needs a loader to switch datasets")
            LOGGER.info(
                "Switching %s dataset to %s", self.chart.name, self.chart.dataset_key(new_state)
            )
            self._records = self._loader(new_state)
        self._state = new_state
        return self.render()

    def play(
        self,
        max_ticks: int | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> int:
        """Run the play timer until the chart stops itself, ``max_ticks`` or ``stop``."""
        interval = self.chart.tick_interval(self._state)
        if interval is None:
            raise ValueError(f"{self.chart.name} has no play control")
        if not getattr(self._state, "playing", False):
            self.dispatch(TogglePlay())
        timer = PlaybackTimer(interval, sleep=sleep)
        self._timer = timer

        def on_tick() -> None:
            self.dispatch(Tick())
            if not getattr(self._state, "playing", False):
                timer.cancel()
                return
            timer.interval = self.chart.tick_interval(self._state) or interval

        try:
            return timer.run(on_tick, max_ticks=max_ticks)
        finally:
            self.stop()

    def stop(self) -> None:
        """Clear the play timer; safe to call any number of times."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if getattr(self._state, "playing", False):
            self.dispatch(TogglePlay())
