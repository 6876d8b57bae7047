"""Tests for diagnostic sinks."""

import structlog.testing

from teo.core.diagnostics import Diagnostic, DiagnosticLog, LoggingSink, NullSink
from teo.core.errors import StrategyExecutionError


class TestDiagnostic:
    def test_given_error_when_to_dict_then_error_serialized(self) -> None:
        # Given
        err = StrategyExecutionError.failed("folder_based", "boom")
        diag = Diagnostic(stage="strategy", event="strategy_failed", severity="warning", error=err)

        # When
        out = diag.to_dict()

        # Then
        assert out["stage"] == "strategy"
        assert out["error"]["error"] == "STRATEGY_FAILED"

    def test_given_data_when_to_dict_then_flattened(self) -> None:
        diag = Diagnostic(stage="diff", event="diff_analyzed", data={"files": 3})
        assert diag.to_dict() == {"stage": "diff", "event": "diff_analyzed", "severity": "info", "files": 3}


class TestDiagnosticLog:
    def test_given_events_when_emitted_then_recorded_in_order(self) -> None:
        # Given
        log = DiagnosticLog()

        # When
        log.emit(Diagnostic(stage="diff", event="a"))
        log.emit(Diagnostic(stage="strategy", event="b", error=StrategyExecutionError.failed("x", "y")))
        log.emit(Diagnostic(stage="strategy", event="c"))

        # Then
        assert [d.event for d in log.events] == ["a", "b", "c"]
        assert len(log) == 3
        assert [d.event for d in log.errors()] == ["b"]
        assert [d.event for d in log.for_stage("strategy")] == ["b", "c"]

    def test_given_forward_sink_when_emitted_then_forwarded(self) -> None:
        # Given
        inner = DiagnosticLog()
        outer = DiagnosticLog(forward=inner)

        # When
        outer.emit(Diagnostic(stage="diff", event="x"))

        # Then
        assert len(inner) == 1

    def test_null_sink_discards(self) -> None:
        assert NullSink().emit(Diagnostic(stage="diff", event="x")) is None


class TestLoggingSink:
    def test_given_warning_when_emitted_then_logged_with_stage(self) -> None:
        # Given
        sink = LoggingSink()
        err = StrategyExecutionError.failed("symbol_based", "boom")

        # When
        with structlog.testing.capture_logs() as logs:
            sink.emit(
                Diagnostic(
                    stage="strategy",
                    event="strategy_failed",
                    severity="warning",
                    data={"strategy": "symbol_based"},
                    error=err,
                )
            )

        # Then
        assert len(logs) == 1
        assert logs[0]["event"] == "strategy_failed"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["stage"] == "strategy"
        assert logs[0]["error_code"] == "STRATEGY_FAILED"
