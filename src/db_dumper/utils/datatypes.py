"""
Contains classes describing the tables to dump and the archives they produce.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .converters import format_date, parse_date, yesterday

ARCHIVE_SUFFIX = '.sql.gz'
STRUCTURE_FILE = 'structure.sql'


@dataclass(frozen=True)
class WholeTable:
    """
    A table which is dumped completely on every run.
    The archive includes drop and create statements.
    """
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class DailyTable:
    """
    A table which is dumped one day at a time.
    Only suitable for tables where rows never move to a different day after
    being written. Days which already have an archive are not dumped again.
    """
    name: str
    date_field: str = 'day'
    # None -> yesterday, relative to the clock of the coordinator
    start_date: Optional[date] = None

    def __str__(self):
        return self.name

    def first_day(self, today: date) -> date:
        """
        :param today: reference day
        :return: first day to dump
        """
        return self.start_date if self.start_date is not None else yesterday(today)


Table = Union[WholeTable, DailyTable]


def parse_table(entry: Mapping) -> Table:
    """
    Build a table descriptor from a config entry.
    {name = "events", daily = true, date_field = "day", start_date = 2009-12-13}
    :param entry: mapping from the config file
    :return: WholeTable or DailyTable
    """
    name = entry.get('name')
    if not name:
        raise ValueError(f'Table entry without a name: {dict(entry)}')
    if not entry.get('daily', False):
        return WholeTable(name=str(name))
    start_date = entry.get('start_date')
    return DailyTable(
        name=str(name),
        date_field=str(entry.get('date_field') or 'day'),
        start_date=parse_date(start_date) if start_date else None,
    )


class JobKind(Enum):
    """
    Represents the three kinds of dumps.
    """
    STRUCTURE = 'structure'
    WHOLE = 'whole'
    DAILY = 'daily'


@dataclass(frozen=True)
class DumpJob:
    """
    A single invocation of mysqldump and where its output goes.
    """
    kind: JobKind
    output: Path
    command: List[str]
    table: Optional[Table] = None
    day: Optional[date] = None

    @property
    def compressed(self) -> bool:
        return self.kind is not JobKind.STRUCTURE

    def __str__(self):
        if self.kind is JobKind.STRUCTURE:
            return 'Structure dump'
        if self.day is None:
            return f'Whole table dump {self.table}'
        return f'Daily dump {self.table} @ {format_date(self.day)}'


def database_dir(root: Path, database: str) -> Path:
    return Path(root) / database


def structure_path(root: Path, database: str) -> Path:
    return database_dir(root, database) / STRUCTURE_FILE


def whole_table_path(root: Path, database: str, table: str) -> Path:
    return database_dir(root, database) / f'{table}{ARCHIVE_SUFFIX}'


def daily_table_dir(root: Path, database: str, table: str) -> Path:
    return database_dir(root, database) / table


def daily_table_path(root: Path, database: str, table: str, day: date) -> Path:
    """
    <root>/<database>/<table>/<table>.<YYYY-MM-DD>.sql.gz
    """
    return daily_table_dir(root, database, table) / f'{table}.{format_date(day)}{ARCHIVE_SUFFIX}'
