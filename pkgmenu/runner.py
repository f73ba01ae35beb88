"""
External command runner for pkg-menu
Starts one child process, streams its output into the session sink and waits
for it under the spinner
"""

import errno
import os
import subprocess
import threading
import time
from typing import Callable, Optional

from pkgmenu.errors import LaunchError
from pkgmenu.models import CommandSpec, RunResult
from pkgmenu.spinner import Spinner

# Shell conventions for commands that never ran
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126

# Seconds to keep reading output once the child has exited; a background
# process that inherited the pipe may hold it open indefinitely
DRAIN_TIMEOUT = 0.5


class ProcessRunner:
    """Runs one CommandSpec at a time and reports a RunResult"""

    def __init__(self, sink, spinner: Optional[Spinner] = None,
                 popen: Optional[Callable] = None,
                 clock: Callable[[], float] = time.monotonic,
                 drain_timeout: float = DRAIN_TIMEOUT):
        self.sink = sink
        self.spinner = spinner or Spinner(sink)
        self._popen = popen or subprocess.Popen
        self._clock = clock
        self.drain_timeout = drain_timeout

    def run(self, command: CommandSpec) -> RunResult:
        """Run command to completion

        Launch failures are reported through the sink and returned as a
        failed RunResult rather than raised.

        Args:
            command: Command to run

        Returns:
            RunResult with the exit status and wall-clock duration
        """
        self.sink.info(f"Running: {command.display()}")
        started = self._clock()

        try:
            process = self._spawn(command)
        except LaunchError as e:
            self.sink.error(str(e))
            return RunResult(command=command, returncode=e.returncode,
                             duration=self._clock() - started, error=e.reason)

        detached = threading.Event()
        reader = threading.Thread(target=self._pump, args=(process.stdout, command, detached),
                                  name="pkgmenu-output", daemon=True)
        reader.start()
        returncode = self.spinner.supervise(process)
        # Child has exited; drain whatever is still buffered in the pipe
        reader.join(self.drain_timeout)
        if reader.is_alive():
            # The reader closes the pipe itself once every writer is gone
            detached.set()
            self.sink.debug(f"Output of '{command.display()}' still open after exit, "
                            "no longer following it")

        duration = self._clock() - started
        self.sink.debug(f"'{command.display()}' exited with {returncode} after {duration:.1f}s")
        return RunResult(command=command, returncode=returncode, duration=duration)

    def _spawn(self, command: CommandSpec):
        """Start the child with stdout and stderr merged into one pipe"""
        env = dict(os.environ)
        env.update(command.environment)
        try:
            return self._popen(
                command.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=env,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise LaunchError(command.display(), EXIT_NOT_FOUND,
                              "command not found") from e
        except PermissionError as e:
            raise LaunchError(command.display(), EXIT_NOT_EXECUTABLE,
                              "permission denied") from e
        except OSError as e:
            code = EXIT_NOT_FOUND if e.errno == errno.ENOENT else EXIT_NOT_EXECUTABLE
            raise LaunchError(command.display(), code, e.strerror or str(e)) from e

    def _pump(self, stream, command: CommandSpec, detached: threading.Event):
        """Copy child output line by line into the sink until EOF or detached"""
        with stream:
            for line in stream:
                if detached.is_set():
                    continue
                line = line.rstrip("\r\n")
                if command.skip_blank_lines and not line.strip():
                    continue
                self.sink.write(line)
