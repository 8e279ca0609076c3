"""Tests for shutdown signal handling."""

import signal

import pytest

from swatch.interrupt_utils import ShutdownHandler, ShutdownRequested, shutdown_signals


class TestShutdownHandler:
    """Tests for ShutdownHandler."""

    def test_shutdown_requested_is_keyboard_interrupt(self):
        err = ShutdownRequested(signal.SIGTERM)
        assert isinstance(err, KeyboardInterrupt)
        assert err.signum == signal.SIGTERM

    def test_supported_signals(self):
        signals = shutdown_signals()
        assert signal.SIGINT in signals
        assert signal.SIGTERM in signals

    def test_handle_raises_when_idle(self):
        handler = ShutdownHandler()
        with pytest.raises(ShutdownRequested):
            handler.handle(signal.SIGTERM)

    def test_handle_defers_while_busy(self):
        busy = [True]
        handler = ShutdownHandler(is_busy=lambda: busy[0])

        handler.handle(signal.SIGINT)
        assert handler.pending == signal.SIGINT

        busy[0] = False
        with pytest.raises(ShutdownRequested) as exc_info:
            handler.raise_if_pending()
        assert exc_info.value.signum == signal.SIGINT
        assert handler.pending is None

    def test_raise_if_pending_without_signal(self):
        ShutdownHandler().raise_if_pending()

    def test_install_and_restore(self):
        previous = signal.getsignal(signal.SIGTERM)
        handler = ShutdownHandler()

        with handler:
            assert signal.getsignal(signal.SIGTERM) == handler.handle
            assert signal.getsignal(signal.SIGINT) == handler.handle

        assert signal.getsignal(signal.SIGTERM) == previous

    @pytest.mark.skipif(not hasattr(signal, "SIGHUP"), reason="POSIX only")
    def test_real_signal_raises(self):
        import os
        import time

        with ShutdownHandler():
            with pytest.raises(ShutdownRequested):
                os.kill(os.getpid(), signal.SIGHUP)
                time.sleep(1)
