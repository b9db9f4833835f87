import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger


def setup_logging(log_dir: Optional[Path], log_level: str = 'INFO',
                  console: Optional[TextIO] = None):
    """
    Replace loguru's default DEBUG sink.
    Commands are logged at DEBUG unless --verbose is given, so the console
    only shows them if the level is lowered explicitly.
    :param log_dir: also write db-dumper.log to this folder. default: None
    :param log_level: level of all sinks
    :param console: stream for console output. default: stderr
    """
    logger.remove()
    logger.add(console or sys.stderr,
               format='<level>{level: <8}</level> | {message}',
               level=log_level,
               diagnose=False)
    if not log_dir:
        return
    if not os.path.isdir(log_dir):
        os.makedirs(log_dir, exist_ok=True)
    logger.add(Path(log_dir) / 'db-dumper.log',
               format='{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}',
               rotation='00:00',
               retention='14 days',
               level=log_level,
               backtrace=True,
               diagnose=False)
