import gzip
import sys
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from loguru import logger

from db_dumper.database import Database
from db_dumper.mysql.runners.base import Runner
from db_dumper.utils.errors import ProcessError

TODAY = date(2024, 3, 10)
YESTERDAY = date(2024, 3, 9)


class FakeRunner(Runner):
    """
    Writes what mysqldump would write for the given flags instead of running it.
    """

    def __init__(self, fail: Optional[Callable[[List[str]], bool]] = None):
        self.calls: List[tuple] = []
        self.envs: List[dict] = []
        self.fail = fail

    @staticmethod
    def render(command: List[str]) -> str:
        args = [x for x in command[1:] if not x.startswith('--')]
        table = args[1] if len(args) > 1 else 'foo'
        lines = ['-- MySQL dump']
        if '--skip-add-drop-table' not in command:
            lines.append(f'DROP TABLE IF EXISTS `{table}`;')
        if '--no-create-info' not in command:
            lines.append(f'CREATE TABLE `{table}` (`day` date);')
        if '--no-data' not in command:
            where = [x for x in command if x.startswith('--where=')]
            lines.append(f'INSERT INTO `{table}` VALUES (1); -- {where}')
        return '\n'.join(lines) + '\n'

    def _record(self, kind: str, command: List[str], output: Path, env):
        self.calls.append((kind, command, Path(output)))
        self.envs.append(env)
        if self.fail and self.fail(command):
            # leave a partial file behind like a real broken pipe would
            Path(output).write_bytes(b'partial')
            raise ProcessError(command, 2, 'mysqldump: Got error: 1045: Access denied')

    def dump(self, command, output, env=None):
        self._record('plain', command, output, env)
        Path(output).write_text(self.render(command))

    def dump_compressed(self, command, output, env=None):
        self._record('compressed', command, output, env)
        with gzip.open(output, 'wt') as f:
            f.write(self.render(command))


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_db(tmp_path, runner):
    def _make(**kwargs):
        params = {
            'database': 'testdb',
            'user': 'dbuser',
            'password': 'dbpasswd',
            'root': tmp_path,
            'runner': runner,
            'today': lambda: TODAY,
        }
        params.update(kwargs)
        return Database(**params)
    return _make
