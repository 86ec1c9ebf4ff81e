"""Analytics reporting windows."""

from __future__ import annotations

from datetime import timedelta

from pydantic import model_validator

from possync.models._base import Instant, PosBaseModel


class AnalyticsPeriod(PosBaseModel):
    """A half-open reporting window ``[start, end)``."""

    start: Instant
    end: Instant

    @model_validator(mode="after")
    def _ordered(self) -> AnalyticsPeriod:
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, value: Instant) -> bool:
        return self.start <= value < self.end


class AnalyticsPeriods(PosBaseModel):
    """The five named periods derived from one reference instant."""

    today: AnalyticsPeriod
    yesterday: AnalyticsPeriod
    this_week: AnalyticsPeriod
    this_month: AnalyticsPeriod
    this_year: AnalyticsPeriod
