"""Subprocess process runner implementation."""

import codecs
import os
import selectors
import subprocess
from typing import Dict, Iterable, Optional

from ..interfaces.process import STREAMS, OutputCallback, ProcessResult, ProcessRunner
from ..logging import get_logger

log = get_logger(__name__)

_CHUNK_SIZE = 4096


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def execute(
        self,
        executable: str,
        *args: str,
        notify: Iterable[str] = (),
        on_output: Optional[OutputCallback] = None,
    ) -> ProcessResult:
        """Run a command, optionally streaming its output."""
        command = [executable, *args]
        notify = frozenset(notify) & STREAMS
        log.debug("subprocess.start", command=command, notify=sorted(notify))

        if not notify or on_output is None:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding=self.encoding,
                errors="replace",
            )
            return ProcessResult(
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        return self._execute_streaming(command, notify, on_output)

    def _execute_streaming(
        self,
        command,
        notify: frozenset,
        on_output: OutputCallback,
    ) -> ProcessResult:
        """Read both pipes as data arrives and hand notified chunks to the callback."""
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        buffers: Dict[str, list] = {"stdout": [], "stderr": []}
        decoders = {
            name: codecs.getincrementaldecoder(self.encoding)(errors="replace")
            for name in buffers
        }

        try:
            with selectors.DefaultSelector() as selector:
                selector.register(process.stdout, selectors.EVENT_READ, "stdout")
                selector.register(process.stderr, selectors.EVENT_READ, "stderr")

                while selector.get_map():
                    for key, _ in selector.select():
                        name = key.data
                        chunk = os.read(key.fileobj.fileno(), _CHUNK_SIZE)
                        if not chunk:
                            selector.unregister(key.fileobj)
                            key.fileobj.close()
                            text = decoders[name].decode(b"", final=True)
                        else:
                            text = decoders[name].decode(chunk)
                        if not text:
                            continue
                        buffers[name].append(text)
                        if name in notify:
                            on_output(name, text)
        except BaseException:
            if process.poll() is None:
                log.warning("subprocess.killed", command=command, pid=process.pid)
                process.kill()
            raise
        finally:
            process.stdout.close()
            process.stderr.close()
            exit_code = process.wait()

        return ProcessResult(
            exit_code=exit_code,
            stdout="".join(buffers["stdout"]),
            stderr="".join(buffers["stderr"]),
        )
