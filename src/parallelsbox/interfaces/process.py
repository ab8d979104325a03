"""Abstract interface for process execution."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

# Called with the stream name ("stdout" or "stderr") and a decoded chunk.
OutputCallback = Callable[[str, str], None]

STREAMS = frozenset({"stdout", "stderr"})


@dataclass(frozen=True)
class ProcessResult:
    """Result of process execution."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(ABC):
    """Abstract interface for process execution."""

    @abstractmethod
    def execute(
        self,
        executable: str,
        *args: str,
        notify: Iterable[str] = (),
        on_output: Optional[OutputCallback] = None,
    ) -> ProcessResult:
        """Run ``executable`` with ``args`` and wait for it to exit.

        For every stream named in ``notify``, ``on_output`` is called with
        each chunk of output as it arrives. The full output is captured in
        the returned result either way.

        Raises ``FileNotFoundError`` when the executable cannot be found.
        """
        pass
