import io

import pytest
from rich.console import Console

from pkgmenu.logger import LoggerManager


class FakeProcess:
    """Stands in for subprocess.Popen: exits after a few polls"""

    def __init__(self, argv, returncode=0, output="", polls=2, **kwargs):
        self.args = list(argv)
        self.kwargs = kwargs
        self.stdout = io.StringIO(output)
        self.returncode = None
        self._exit_status = returncode
        self._polls_left = polls

    def poll(self):
        if self._polls_left > 0:
            self._polls_left -= 1
            return None
        self.returncode = self._exit_status
        return self.returncode


class FakePopen:
    """Records every launch; results are looked up by the apt sub-command"""

    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        if self.error is not None:
            raise self.error
        returncode, output = self.results.get(argv[1], (0, ""))
        return FakeProcess(argv, returncode=returncode, output=output, **kwargs)

    @property
    def argvs(self):
        return [argv for argv, _ in self.calls]


def _read_log(sink):
    with open(sink.log_path, encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def console_buffer():
    return io.StringIO()


@pytest.fixture
def make_sink(tmp_path, console_buffer):
    """Factory for sinks writing to a buffer console and a log under tmp_path"""
    sinks = []

    def factory(stdin_text="", console=None):
        sink = LoggerManager(
            str(tmp_path / "logs" / "pkg-menu-test.log"),
            console=console or Console(file=console_buffer, width=200,
                                       highlight=False, soft_wrap=True),
            stdin=io.StringIO(stdin_text),
            name="pkgmenu.test",
        )
        sinks.append(sink)
        return sink

    yield factory
    for sink in sinks:
        sink.close()


@pytest.fixture
def sink(make_sink):
    return make_sink()


@pytest.fixture
def read_log():
    """Return a function reading a sink's log file"""
    return _read_log


@pytest.fixture
def fake_process():
    """Return the FakeProcess class"""
    return FakeProcess


@pytest.fixture
def fake_popen():
    """Return a fresh FakePopen; call it with results to configure"""
    return FakePopen
