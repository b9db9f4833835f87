import os
import subprocess
import tempfile
from pathlib import Path
from typing import IO, Dict, List, Optional

from loguru import logger

from db_dumper.mysql.client import COMPRESSOR
from db_dumper.mysql.runners.base import Runner
from db_dumper.utils.errors import ProcessError


def _read(stream: IO[bytes]) -> str:
    stream.seek(0)
    return stream.read().decode(errors='replace')


def _start(command: List[str], **kwargs) -> subprocess.Popen:
    try:
        return subprocess.Popen(command, **kwargs)
    except OSError as e:
        raise ProcessError(command, 127, str(e)) from e


def _environ(env: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    return {**os.environ, **env} if env else None


class PipeRunner(Runner):
    """
    Runs the commands as local processes.
    The dump is streamed through the compressor into the target file;
    nothing is held in memory.
    """

    def __init__(self, compressor: Optional[List[str]] = None):
        """
        :param compressor: reads stdin, writes stdout. default: gzip -c
        """
        self.compressor = compressor or COMPRESSOR

    def dump(self, command: List[str], output: Path,
             env: Optional[Dict[str, str]] = None) -> None:
        with open(output, 'wb') as f, tempfile.TemporaryFile() as err:
            process = _start(command, stdout=f, stderr=err, env=_environ(env))
            returncode = process.wait()
            if returncode != 0:
                raise ProcessError(command, returncode, _read(err))

    def dump_compressed(self, command: List[str], output: Path,
                        env: Optional[Dict[str, str]] = None) -> None:
        with open(output, 'wb') as f, \
                tempfile.TemporaryFile() as dump_err, \
                tempfile.TemporaryFile() as compress_err:
            dump = _start(command, stdout=subprocess.PIPE, stderr=dump_err, env=_environ(env))
            try:
                compress = _start(self.compressor, stdin=dump.stdout, stdout=f,
                                  stderr=compress_err)
            except ProcessError:
                dump.kill()
                dump.wait()
                raise
            finally:
                # the compressor holds the only reader now. dump gets SIGPIPE if it exits.
                dump.stdout.close()
            compress_status = compress.wait()
            dump_status = dump.wait()
            logger.debug(f'{command[0]} exited with {dump_status}, '
                         f'{self.compressor[0]} exited with {compress_status}')
            # a dump killed by a signal (SIGPIPE) is a consequence of a dead compressor
            if compress_status != 0 and dump_status <= 0:
                raise ProcessError(self.compressor, compress_status, _read(compress_err))
            if dump_status != 0:
                raise ProcessError(command, dump_status, _read(dump_err))
            if compress_status != 0:
                raise ProcessError(self.compressor, compress_status, _read(compress_err))
