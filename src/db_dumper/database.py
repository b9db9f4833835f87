"""
Dumps a MySQL database without locking tables for extended periods.

Each table is dumped on its own, either whole or daily.
Whole tables are dumped on every run and include drop/create statements.
Daily tables get one archive per day from their start date up to yesterday.
Days which already have an archive are skipped, so restoring a single day
does not touch the rest of the table.

Layout below the root folder:
    <database>/structure.sql
    <database>/<table>.sql.gz
    <database>/<table>/<table>.<YYYY-MM-DD>.sql.gz
"""
import os
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from loguru import logger

from db_dumper.mysql.client import Client
from db_dumper.mysql.runners.base import Runner
from db_dumper.mysql.runners.pipe import PipeRunner
from db_dumper.utils.converters import DateRange, yesterday
from db_dumper.utils.datatypes import (DailyTable, DumpJob, JobKind, Table,
                                       WholeTable, daily_table_dir,
                                       daily_table_path, database_dir,
                                       structure_path, whole_table_path)
from db_dumper.utils.errors import (ConfigurationError, DirectoryError,
                                    DumpError, ProcessError)


PART_SUFFIX = '.part'


def _is_file_name(name: str) -> bool:
    """
    Names end up as folder and file names, so they must stay inside their folder.
    """
    if name in ('.', '..'):
        return False
    return os.sep not in name and not (os.altsep and os.altsep in name)


class Database:
    """
    Holds the connection parameters and the tables to dump.
    Tables can also be appended to `tables` after creating the object.
    """

    def __init__(self, database: str, user: str, password: Optional[str] = None,
                 tables: Optional[Iterable[Table]] = None,
                 verbose: bool = False,
                 root: Path = Path('.'),
                 runner: Optional[Runner] = None,
                 today: Optional[Callable[[], date]] = None):
        """
        :param database: name of the database
        :param user: database user
        :param password: default: None
        :param tables: ordered tables to dump
        :param verbose: log every command at INFO level before running it
        :param root: folder which receives the database folder. default: cwd
        :param runner: executes the commands. default: PipeRunner
        :param today: clock returning the current day. default: date.today
        """
        self.database = database
        self.user = user
        self.password = password
        self.tables: List[Table] = list(tables or [])
        self.verbose = verbose
        self.root = Path(root)
        self.runner = runner if runner is not None else PipeRunner()
        self.today = today if today is not None else date.today
        self.client = Client(database, user, password)

    @property
    def whole_tables(self) -> List[WholeTable]:
        return [t for t in self.tables if isinstance(t, WholeTable)]

    @property
    def daily_tables(self) -> List[DailyTable]:
        return [t for t in self.tables if isinstance(t, DailyTable)]

    @property
    def directory(self) -> Path:
        return database_dir(self.root, self.database)

    def validate(self):
        """
        Check the parameters before anything is written.
        Password might be absent.
        :raises ConfigurationError: on missing or invalid values
        """
        if not self.database:
            raise ConfigurationError('A database name is required!')
        if not _is_file_name(self.database):
            raise ConfigurationError(f'Invalid database name: {self.database}')
        if not self.user:
            raise ConfigurationError('A database user is required!')
        for table in self.tables:
            if not isinstance(table, (WholeTable, DailyTable)):
                raise ConfigurationError(f'Not a table descriptor: {table!r}')
            if not table.name:
                raise ConfigurationError('Tables must have a name!')
            if not _is_file_name(table.name):
                raise ConfigurationError(f'Invalid table name: {table.name}')
            if isinstance(table, DailyTable) and not table.date_field:
                raise ConfigurationError(f'Daily table {table.name} needs a date field!')

    def days(self, table: DailyTable) -> DateRange:
        """
        All days of a daily table from its start date up to yesterday.
        """
        today = self.today()
        return DateRange(table.first_day(today), yesterday(today))

    def pending_days(self, table: DailyTable) -> List[date]:
        """
        Days of a daily table which do not have an archive yet.
        Only the existence of the file counts, the content is never checked.
        """
        return [
            day for day in self.days(table)
            if not daily_table_path(self.root, self.database, table.name, day).is_file()
        ]

    def _structure_job(self) -> DumpJob:
        return DumpJob(kind=JobKind.STRUCTURE,
                       output=structure_path(self.root, self.database),
                       command=self.client.structure_command())

    def _whole_table_job(self, table: WholeTable) -> DumpJob:
        return DumpJob(kind=JobKind.WHOLE,
                       output=whole_table_path(self.root, self.database, table.name),
                       command=self.client.whole_table_command(table.name),
                       table=table)

    def _daily_table_job(self, table: DailyTable, day: date) -> DumpJob:
        return DumpJob(kind=JobKind.DAILY,
                       output=daily_table_path(self.root, self.database, table.name, day),
                       command=self.client.daily_table_command(table.name, table.date_field,
                                                               day),
                       table=table,
                       day=day)

    def plan(self) -> List[DumpJob]:
        """
        Jobs which a call of dump() would run, in order. Nothing is executed.
        :return: list of jobs
        """
        self.validate()
        jobs = [self._structure_job()]
        jobs += [self._whole_table_job(t) for t in self.whole_tables]
        for table in self.daily_tables:
            jobs += [self._daily_table_job(table, day) for day in self.pending_days(table)]
        return jobs

    def dump(self) -> List[DumpJob]:
        """
        Dumps the structure, all whole tables and the missing daily archives.
        Structure and whole table archives are overwritten on every call.
        Stops at the first failing job. Archives written before are kept.
        :return: jobs which were executed
        :raises ConfigurationError: on invalid parameters
        :raises DirectoryError: if an output folder cannot be used
        :raises DumpError: if mysqldump or gzip fails
        """
        self.validate()
        self._mkdir(self.directory)
        done = []
        logger.info(f'Dumping database {self.database} to {self.directory}')
        for job in [self._structure_job()] + [self._whole_table_job(t)
                                              for t in self.whole_tables]:
            self._execute(job)
            done.append(job)
        for table in self.daily_tables:
            done += self._dump_daily_table(table)
        logger.info(f'Dump of {self.database} finished. {len(done)} file(s) written.')
        return done

    def _dump_daily_table(self, table: DailyTable) -> List[DumpJob]:
        self._mkdir(daily_table_dir(self.root, self.database, table.name))
        done = []
        skipped = 0
        for day in self.days(table):
            job = self._daily_table_job(table, day)
            if job.output.is_file():
                skipped += 1
                continue
            self._execute(job)
            done.append(job)
        logger.info(f'Daily table {table}: {len(done)} day(s) dumped, '
                    f'{skipped} already archived.')
        return done

    def _execute(self, job: DumpJob):
        message = f'{job}: {self.client.describe(job.command)} > {job.output}'
        if self.verbose:
            logger.info(message)
        else:
            logger.debug(message)
        # only a complete archive may ever exist under the final name
        part = job.output.with_name(job.output.name + PART_SUFFIX)
        env = self.client.environment()
        try:
            if job.compressed:
                self.runner.dump_compressed(job.command, part, env=env)
            else:
                self.runner.dump(job.command, part, env=env)
            os.replace(part, job.output)
        except ProcessError as e:
            part.unlink(missing_ok=True)
            table = job.table.name if job.table else self.database
            raise DumpError(table, job.day, e) from e
        except BaseException:
            part.unlink(missing_ok=True)
            raise

    @staticmethod
    def _mkdir(path: Path):
        """
        Create the folder (recursive) and make sure it really is one.
        :raises DirectoryError: if the folder cannot be used
        """
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(path, e.strerror or str(e)) from e
        if not path.is_dir():
            raise DirectoryError(path, 'not a directory')
