"""
Progress spinner for pkg-menu
Polls a running child process and animates a single character until it exits
"""

import time
from typing import Callable, Optional

FRAMES = "|/-\\"


class Spinner:
    """Terminal-only progress indicator driven by polling a process handle"""

    def __init__(self, sink, interval: float = 0.1, frames: str = FRAMES,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            sink: Output sink providing draw_frame() and clear_frame()
            interval: Seconds between frames
            frames: Characters cycled through, one per frame
            sleep: Sleep function, replaceable in tests
        """
        self.sink = sink
        self.interval = interval
        self.frames = frames
        self._sleep = sleep

    def supervise(self, process) -> Optional[int]:
        """Block until process exits, drawing one frame per interval

        Args:
            process: Anything with a non-blocking poll() and a returncode,
                     normally a subprocess.Popen

        Returns:
            The process exit status
        """
        index = 0
        try:
            while process.poll() is None:
                self.sink.draw_frame(self.frames[index % len(self.frames)])
                index += 1
                self._sleep(self.interval)
        finally:
            self.sink.clear_frame()
        return process.returncode
