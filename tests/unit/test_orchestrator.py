"""Tests for the watch orchestrator."""

import signal
from typing import Iterator, List
from unittest.mock import MagicMock

import pytest

from swatch.build.compiler import CompileAttempt, CompileOutcome
from swatch.interrupt_utils import ShutdownRequested
from swatch.orchestrator import Orchestrator, OrchestratorState
from swatch.watch.backend import WatchBackend, WatchBackendError
from swatch.watch.events import ChangeEvent, ChangeKind
from swatch.watch.polling import PollingBackend


class ScriptedBackend(WatchBackend):
    """Backend that replays a fixed list of events, then optionally raises."""

    name = "scripted"
    tool = None

    def __init__(self, working_dir, events: List[ChangeEvent], end_with: BaseException = None):
        super().__init__(working_dir)
        self._events = events
        self._end_with = end_with
        self.closed = False

    def events(self) -> Iterator[ChangeEvent]:
        yield from self._events
        if self._end_with is not None:
            raise self._end_with

    def close(self) -> None:
        self.closed = True


def _attempt(outcome=CompileOutcome.SUCCESS):
    return CompileAttempt(outcome=outcome)


class TestOrchestrator:
    """Tests for Orchestrator.run."""

    @pytest.fixture
    def project(self, tmp_path):
        (tmp_path / "site.css").write_text("")
        (tmp_path / "_base.css").write_text("")
        return tmp_path

    @pytest.fixture
    def compiler(self):
        compiler = MagicMock()
        compiler.compile.return_value = _attempt()
        return compiler

    def make(self, project, compiler, backend=None, watch=True, output_dir=None):
        selector = MagicMock()
        selector.select.return_value = backend
        orchestrator = Orchestrator(
            working_dir=project,
            output_dir=output_dir if output_dir is not None else project,
            compiler=compiler,
            watch=watch,
            selector=selector,
        )
        return orchestrator, selector

    def test_missing_output_dir(self, project, compiler, capsys):
        orchestrator, selector = self.make(project, compiler, output_dir=project / "missing")

        assert orchestrator.run() == 1
        compiler.compile.assert_not_called()
        selector.select.assert_not_called()
        assert "Output directory does not exist" in capsys.readouterr().err
        assert orchestrator.state is OrchestratorState.STOPPED

    def test_output_path_is_a_file(self, project, compiler):
        orchestrator, _ = self.make(project, compiler, output_dir=project / "site.css")
        assert orchestrator.run() == 1

    def test_no_watch_success(self, project, compiler):
        orchestrator, selector = self.make(project, compiler, watch=False)

        assert orchestrator.run() == 0
        compiler.compile.assert_called_once_with(project / "site.css", initial=True)
        selector.select.assert_not_called()

    def test_no_watch_compile_failure_exits_cleanly(self, project, compiler):
        compiler.compile.return_value = _attempt(CompileOutcome.FAILURE)
        orchestrator, _ = self.make(project, compiler, watch=False)
        assert orchestrator.run() == 0
        compiler.compile.assert_called_once()

    def test_no_watch_no_entry(self, tmp_path, compiler):
        (tmp_path / "_only.css").write_text("")
        orchestrator, _ = self.make(tmp_path, compiler, watch=False)

        assert orchestrator.run() == 1
        compiler.compile.assert_not_called()

    def test_watch_compiles_on_each_event(self, project, compiler, capsys):
        events = [
            ChangeEvent(project / "_base.css", ChangeKind.MODIFIED),
            ChangeEvent(project / "site.css", ChangeKind.MODIFIED),
        ]
        backend = ScriptedBackend(project, events)
        orchestrator, _ = self.make(project, compiler, backend=backend)

        assert orchestrator.run() == 0

        assert compiler.compile.call_count == 3
        assert compiler.compile.call_args_list[0].kwargs == {"initial": True}
        assert all(c.args[0] == project / "site.css" for c in compiler.compile.call_args_list)
        assert backend.closed

        out = capsys.readouterr().out
        assert "_base.css changed (" in out
        assert "Using scripted for file watching" in out
        assert "Press Ctrl+C to stop watching" in out

    def test_watch_continues_after_no_entry(self, tmp_path, compiler):
        (tmp_path / "_base.css").write_text("")
        backend = ScriptedBackend(tmp_path, [ChangeEvent(tmp_path / "_base.css")])
        orchestrator, selector = self.make(tmp_path, compiler, backend=backend)

        assert orchestrator.run() == 0
        selector.select.assert_called_once()
        compiler.compile.assert_not_called()

    def test_interrupt_exits_cleanly(self, project, compiler, capsys):
        backend = ScriptedBackend(project, [], end_with=ShutdownRequested(signal.SIGTERM))
        orchestrator, _ = self.make(project, compiler, backend=backend)

        assert orchestrator.run() == 0
        assert backend.closed
        assert "Stopping..." in capsys.readouterr().out
        assert orchestrator.state is OrchestratorState.STOPPED

    def test_signal_handlers_restored(self, project, compiler):
        previous = signal.getsignal(signal.SIGTERM)
        backend = ScriptedBackend(project, [], end_with=KeyboardInterrupt())
        orchestrator, _ = self.make(project, compiler, backend=backend)

        orchestrator.run()

        assert signal.getsignal(signal.SIGTERM) == previous

    def test_signal_during_compile_is_deferred(self, project, compiler):
        """A signal that arrives mid-compile stops the loop after that compile."""
        events = [ChangeEvent(project / "site.css"), ChangeEvent(project / "site.css")]
        backend = ScriptedBackend(project, events)
        orchestrator, _ = self.make(project, compiler, backend=backend)

        def compile_then_signal(entry, initial=False):
            if not initial:
                handler = signal.getsignal(signal.SIGTERM)
                handler(signal.SIGTERM, None)
            return _attempt()

        compiler.compile.side_effect = compile_then_signal

        assert orchestrator.run() == 0
        # initial compile + first event; the second event is never processed
        assert compiler.compile.call_count == 2
        assert backend.closed

    def test_backend_error(self, project, compiler, capsys):
        backend = ScriptedBackend(project, [], end_with=WatchBackendError("fswatch exited with code 1"))
        orchestrator, _ = self.make(project, compiler, backend=backend)

        assert orchestrator.run() == 1
        assert backend.closed
        assert "fswatch exited with code 1" in capsys.readouterr().err

    def test_polling_announcement(self, project, compiler, capsys):
        backend = PollingBackend(project)
        backend.events = MagicMock(return_value=iter(()))
        orchestrator, _ = self.make(project, compiler, backend=backend)

        assert orchestrator.run() == 0
        out = capsys.readouterr().out
        assert "Using polling" in out
        assert "brew install watchman" in out
