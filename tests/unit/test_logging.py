"""Unit tests for the progress channel."""

from reelforge.common.logging import ProgressLevel, ProgressReporter


class TestProgressReporter:
    """Tests for ProgressReporter."""

    def test_delivers_events(self):
        reporter = ProgressReporter()
        events = []
        reporter.subscribe(events.append)

        reporter.emit("Connecting...", ProgressLevel.CONNECT, attempt=1)

        assert len(events) == 1
        assert events[0].message == "Connecting..."
        assert events[0].level == ProgressLevel.CONNECT
        assert events[0].fields == {"attempt": 1}

    def test_accepts_level_strings(self):
        reporter = ProgressReporter()
        events = []
        reporter.subscribe(events.append)

        reporter.emit("done", "success")

        assert events[0].level == ProgressLevel.SUCCESS

    def test_listener_failure_is_contained(self):
        reporter = ProgressReporter()
        events = []

        def broken(event):
            raise RuntimeError("ui went away")

        reporter.subscribe(broken)
        reporter.subscribe(events.append)

        reporter.emit("still running", ProgressLevel.WARNING)

        assert [e.message for e in events] == ["still running"]

    def test_unsubscribe(self):
        reporter = ProgressReporter()
        events = []
        reporter.subscribe(events.append)
        reporter.unsubscribe(events.append)

        reporter.emit("nobody listening")

        assert events == []
