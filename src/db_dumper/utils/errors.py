"""
Exceptions raised by the dumper.
"""
from datetime import date
from pathlib import Path
from typing import List, Optional


class DumperError(Exception):
    """
    Base class for all dumper errors.
    """


class ConfigurationError(DumperError, ValueError):
    """
    The coordinator was given invalid parameters.
    """


class DirectoryError(DumperError, OSError):
    """
    An output directory could not be created or is occupied by a file.
    """

    def __init__(self, path: Path, reason: str = ''):
        self.path = Path(path)
        message = f'Unable to use directory {self.path}'
        if reason:
            message += f': {reason}'
        super().__init__(message)


class ProcessError(DumperError):
    """
    An external process exited with an error.
    """

    def __init__(self, command: List[str], returncode: int, stderr: str = ''):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f'{command[0]} exited with status {returncode}'
        if self.stderr:
            message += f': {self.stderr}'
        super().__init__(message)


class DumpError(DumperError):
    """
    Dumping a table (or one day of a daily table) failed.
    """

    def __init__(self, table: str, day: Optional[date], cause: ProcessError):
        self.table = table
        self.day = day
        self.cause = cause
        target = f'table {table}' if day is None else f'table {table} for {day:%Y-%m-%d}'
        super().__init__(f'Dump of {target} failed! {cause}')

    @property
    def returncode(self) -> int:
        return self.cause.returncode
