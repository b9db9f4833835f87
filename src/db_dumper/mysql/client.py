"""
MySQL client / mysqldump command construction
"""
import shlex
from datetime import date
from typing import Dict, List, Optional

from db_dumper.utils.converters import format_date

MYSQLDUMP = 'mysqldump'
COMPRESSOR = ['gzip', '-c']


class Client:
    """
    Builds mysqldump commands for a database on localhost.
    """

    def __init__(self, database: str, user: str, password: Optional[str] = None):
        """
        :param database: name of the database
        :param user: database user
        :param password: default: None. Handed to mysqldump as MYSQL_PWD, never on argv.
        """
        self.database = database
        self.user = user
        self.password = password

    def _mysqldump(self, pre: Optional[List[str]] = None,
                   post: Optional[List[str]] = None) -> List[str]:
        """
        Wrapper for the mysqldump command line.
        :param pre: options placed before the database name
        :param post: arguments placed after the database name (tables)
        :return: argument vector
        """
        command = [MYSQLDUMP, f'--user={self.user}']
        command += pre or []
        command.append(self.database)
        command += post or []
        return command

    def structure_command(self) -> List[str]:
        """
        Structure of the whole database without any rows.
        """
        return self._mysqldump(pre=['--no-data'])

    def whole_table_command(self, table: str) -> List[str]:
        """
        Full dump of one table. mysqldump adds drop/create statements by default.
        """
        return self._mysqldump(post=[table])

    def daily_table_command(self, table: str, date_field: str, day: date) -> List[str]:
        """
        Rows of one table for a single day, without drop/create statements.
        :param table: table name
        :param date_field: column which decides the day of a row
        :param day: day to dump
        """
        pre = [
            '--skip-add-drop-table',
            '--no-create-info',
            f"--where={date_field}='{format_date(day)}'",
        ]
        return self._mysqldump(pre=pre, post=[table])

    def environment(self) -> Dict[str, str]:
        """
        Extra environment for mysqldump. Keeps the password out of the process list.
        """
        if self.password is None:
            return {}
        return {'MYSQL_PWD': self.password}

    @staticmethod
    def describe(command: List[str]) -> str:
        """
        Render a command for log output.
        """
        return shlex.join(command)
