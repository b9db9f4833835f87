"""
helpers for converting values from one format to a different one
"""
from datetime import date, datetime, timedelta
from typing import Iterator

DATE_FORMAT = '%Y-%m-%d'


def format_date(day: date) -> str:
    """
    Convert the given date to the format used in SQL and in archive names.
    Format: DATE_FORMAT
    :param day: date object
    :return: formatted date
    """
    return day.strftime(DATE_FORMAT)


def parse_date(value: date or datetime or str) -> date:
    """
    Convert the given value to a date.
    TOML parsers already hand out date objects for unquoted dates.
    :param value: date, datetime or YYYY-MM-DD string
    :return: parsed date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    raise ValueError(f'Invalid date: {value!r}')


def yesterday(today: date) -> date:
    """
    :param today: reference day
    :return: the day before today
    """
    return today - timedelta(days=1)


class DateRange:
    """
    Ascending calendar days from start to end (both inclusive).
    Empty if start is after end. Can be iterated more than once.
    """

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def __len__(self) -> int:
        return max((self.end - self.start).days + 1, 0)

    def __repr__(self):
        return f'DateRange({format_date(self.start)}, {format_date(self.end)})'
