from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional


class Runner(ABC):
    """
    ABC for runner implementations.
    Implements how a dump command is executed and where its output is written.
    """

    @abstractmethod
    def dump(self, command: List[str], output: Path,
             env: Optional[Dict[str, str]] = None) -> None:
        """
        Run the command and write its standard output to output.
        :param command: argument vector
        :param output: target file. Overwritten if it exists.
        :param env: extra environment variables for the command
        :raises ProcessError: if the command fails
        """
        pass

    @abstractmethod
    def dump_compressed(self, command: List[str], output: Path,
                        env: Optional[Dict[str, str]] = None) -> None:
        """
        Run the command, compress its standard output and write it to output.
        :param command: argument vector
        :param output: target file. Overwritten if it exists.
        :param env: extra environment variables for the command (not the compressor)
        :raises ProcessError: if the command or the compressor fails
        """
        pass
