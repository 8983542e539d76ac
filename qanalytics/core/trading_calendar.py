"""
Trading-day calendar and price records.

Weekdays are trading days (no holiday calendar). Stepping is done with
pandas business-day offsets.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import pandas as pd
from pandas.tseries.offsets import BDay


@dataclass(frozen=True)
class PriceRecord:
    """
    A (day, price) observation.

    Attributes:
        day: Observation date
        price: Price on that day (non-positive prices break return chains)
    """
    day: date
    price: float


def _to_date(value) -> date:
    return pd.Timestamp(value).date()


def is_trading_day(day: date) -> bool:
    return day.weekday() < 5


def ensure_trading_day(day: date) -> date:
    """Return day itself if it is a trading day, else the next one."""
    if is_trading_day(day):
        return day
    return next_trading_day(day)


def next_trading_day(day: date) -> date:
    return _to_date(pd.Timestamp(day) + BDay(1))


def add_trading_days(day: date, count: int) -> date:
    return _to_date(pd.Timestamp(day) + BDay(count))


def count_calendar_days(start: date, end: date) -> int:
    return (end - start).days


def count_trading_days(start: date, end: date) -> int:
    """Trading days strictly after start up to and including end."""
    if end <= start:
        return 0
    return len(pd.bdate_range(start, end)) - (1 if is_trading_day(start) else 0)


def trading_days(start: date, end: date) -> List[date]:
    """All trading days in [ensure_trading_day(start), end]."""
    return [ts.date() for ts in pd.bdate_range(ensure_trading_day(start), end)]


def to_frame(records: List[PriceRecord]) -> pd.DataFrame:
    """Price records as a DataFrame indexed by day."""
    frame = pd.DataFrame(
        {'price': [r.price for r in records]},
        index=pd.Index([r.day for r in records], name='day')
    )
    return frame


def from_series(series: pd.Series, start: Optional[date] = None) -> List[PriceRecord]:
    """
    Build price records from a pandas Series.

    If the series has a datetime-like index it is used as the days;
    otherwise consecutive trading days from start (default: today) are
    assigned.
    """
    if isinstance(series.index, pd.DatetimeIndex):
        return [PriceRecord(ts.date(), float(p)) for ts, p in series.items()]

    day = ensure_trading_day(start or date.today())
    records = []
    for price in series.to_numpy():
        records.append(PriceRecord(day, float(price)))
        day = next_trading_day(day)
    return records
