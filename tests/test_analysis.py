"""Tests for bottleneck detection and recommendations."""

from loadtest.config import Thresholds
from loadtest.models import AggregatedReport, ErrorSummary, LatencyStats
from loadtest.report import analyze


def stats(p50=10.0, p95=20.0, p99=30.0, count=10):
    return LatencyStats(count=count, avg=p50, p50=p50, p95=p95, p99=p99, min=1.0, max=p99)


def make_report(operations=None, propagation=None, errors=0, peak=10, data=1024):
    return AggregatedReport(
        operations=operations if operations is not None else {"createGame": stats()},
        propagation=propagation,
        errors=ErrorSummary(count=errors, types={("startGame", "boom"): errors} if errors else {}),
        peak_connections=peak,
        data_transferred=data,
    )


GENERAL_NOTES = 2


class TestSlowest:
    """Tests for slowest-operation detection."""

    def test_highest_p95_flagged(self):
        """Test that the highest p95 is reported."""
        report = make_report({"a": stats(p95=50), "b": stats(p95=120), "c": stats(p95=80)})
        analysis = analyze(report)

        assert analysis.slowest_operation == "b"
        assert analysis.slowest_p95 == 120
        assert analysis.bottlenecks[0] == 'Slowest operation (P95): "b" at 120.0ms'

    def test_tie_first_wins(self):
        """Test that ties resolve to the first operation in order."""
        report = make_report({"a": stats(p95=70), "b": stats(p95=70)})
        assert analyze(report).slowest_operation == "a"

    def test_no_operations(self):
        """Test an empty report."""
        analysis = analyze(make_report({}))

        assert analysis.slowest_operation is None
        assert analysis.bottlenecks == []
        assert len(analysis.recommendations) == GENERAL_NOTES


class TestHighVariance:
    """Tests for high-variance detection."""

    def test_flagged(self):
        """Test p50=10, p99=60, count=10 is flagged."""
        report = make_report({"level1_complete": stats(p50=10, p95=40, p99=60, count=10)})
        bottlenecks = analyze(report).bottlenecks

        assert any("High variance" in b and "6.0x" in b for b in bottlenecks)

    def test_small_bucket_ignored(self):
        """Test that count must exceed five."""
        report = make_report({"op": stats(p50=10, p95=40, p99=60, count=5)})
        assert not any("High variance" in b for b in analyze(report).bottlenecks)

    def test_ratio_at_limit_ignored(self):
        """Test that p99 exactly 5x p50 is not flagged."""
        report = make_report({"op": stats(p50=10, p95=40, p99=50, count=10)})
        assert not any("High variance" in b for b in analyze(report).bottlenecks)

    def test_zero_p50(self):
        """Test that a zero median does not divide by zero."""
        report = make_report({"op": stats(p50=0, p95=5, p99=5, count=10)})
        assert any("infx" in b for b in analyze(report).bottlenecks)


class TestPropagationAndErrors:
    """Tests for propagation and error-rate checks."""

    def test_slow_propagation(self):
        """Test propagation p95 over 500 is a bottleneck and a recommendation."""
        report = make_report(propagation=stats(p50=100, p95=600, p99=700))
        analysis = analyze(report)

        assert any("Listener propagation P95 (600.0ms)" in b for b in analysis.bottlenecks)
        assert any("granular subscriptions" in r for r in analysis.recommendations)

    def test_moderate_propagation(self):
        """Test propagation p95 between 300 and 500 only recommends."""
        analysis = analyze(make_report(propagation=stats(p50=100, p95=400, p99=450)))

        assert not any("Listener propagation P95" in b for b in analysis.bottlenecks)
        assert any("granular subscriptions" in r for r in analysis.recommendations)

    def test_error_rate_over_threshold(self):
        """Test error rate errors / total ops over 1%."""
        report = make_report({"op": stats(count=100)}, errors=2)
        analysis = analyze(report)

        assert analysis.error_rate_pct == 2.0
        assert any("Error rate 2.00%" in b and "(2 errors in 100 operations)" in b
                   for b in analysis.bottlenecks)
        assert any(r.startswith("Address 2 errors") for r in analysis.recommendations)

    def test_error_rate_at_threshold(self):
        """Test exactly 1% is not flagged but still recommends remediation."""
        analysis = analyze(make_report({"op": stats(count=100)}, errors=1))

        assert not any("Error rate" in b for b in analysis.bottlenecks)
        assert any(r.startswith("Address 1 errors") for r in analysis.recommendations)


class TestRecommendations:
    """Tests for recommendation thresholds."""

    def test_quiet_run(self):
        """Test that a healthy run only gets the general notes."""
        analysis = analyze(make_report(), teams=3, players=3)

        assert len(analysis.recommendations) == GENERAL_NOTES
        assert "App Check" in analysis.recommendations[-1]

    def test_critical_and_warning(self):
        """Test that a p95 over 1000 yields both critical and warning."""
        recs = analyze(make_report({"op": stats(p95=1200, p99=1300)})).recommendations

        assert recs[0].startswith("CRITICAL")
        assert recs[1].startswith("WARNING")

    def test_warning_only(self):
        """Test that a p95 between 500 and 1000 yields only the warning."""
        recs = analyze(make_report({"op": stats(p95=600, p99=700)})).recommendations

        assert not any(r.startswith("CRITICAL") for r in recs)
        assert recs[0].startswith("WARNING")

    def test_connections_and_data(self):
        """Test connection-capacity and payload notes."""
        recs = analyze(make_report(peak=101, data=5 * 1024 * 1024 + 1)).recommendations

        assert any("Peak concurrent connections (101)" in r for r in recs)
        assert any("High data transfer (5.0MB)" in r for r in recs)

    def test_capacity_note(self):
        """Test the capacity note needs both 30 teams and 10 players."""
        with_note = analyze(make_report(), teams=30, players=10).recommendations
        without = analyze(make_report(), teams=29, players=10).recommendations

        assert "300+ connections" in with_note[-1]
        assert len(without) == GENERAL_NOTES

    def test_custom_thresholds(self):
        """Test that thresholds can be overridden independently."""
        limits = Thresholds(slow_p95_warning_ms=50, peak_connections=5, capacity_teams=2,
                            capacity_players=2)
        recs = analyze(make_report({"op": stats(p95=60)}), limits, teams=2, players=2).recommendations

        assert recs[0] == (
            "WARNING: P95 latency exceeds 50ms. Consider batching writes with "
            "multi-path updates to reduce round trips."
        )
        assert any("Peak concurrent connections (10)" in r for r in recs)
        assert "4+ connections" in recs[-1]


class TestSlowestAllZero:
    """Tests for reports where every operation is instantaneous."""

    def test_no_slowest_when_all_p95_zero(self):
        """Test that zero p95 everywhere yields no slowest operation."""
        report = make_report({"a": stats(p50=0, p95=0, p99=0), "b": stats(p50=0, p95=0, p99=0)})
        analysis = analyze(report)

        assert analysis.slowest_operation is None
        assert not any(b.startswith("Slowest operation") for b in analysis.bottlenecks)
