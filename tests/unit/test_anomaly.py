"""Tests for anomaly detection module."""

import pytest

from billing_export_notifier.analysis.anomaly_detector import AnomalyDetector
from billing_export_notifier.config.schema import AnomalyDetectionConfig
from billing_export_notifier.warehouse.base import CostRecord, calculate_change_rate, safe_divide


def create_detector(threshold: float) -> AnomalyDetector:
    return AnomalyDetector(AnomalyDetectionConfig(threshold_percentage=threshold))


class TestChangeRate:
    """Tests for the change rate helpers."""

    def test_safe_divide_by_zero(self):
        assert safe_divide(50.0, 0) is None
        assert safe_divide(50.0, 0.0) is None

    def test_safe_divide_missing_operand(self):
        assert safe_divide(None, 10.0) is None
        assert safe_divide(10.0, None) is None

    @pytest.mark.parametrize(
        "yesterday, today, expected",
        [
            (100.0, 150.0, 50.0),
            (100.0, 110.0, 10.0),
            (200.0, 50.0, -75.0),
            (3.0, 4.0, 33.33),
            (3.0, 5.0, 66.67),
        ],
    )
    def test_rounded_percentage(self, yesterday, today, expected):
        """Test round(((today - yesterday) / yesterday) * 100, 2)."""
        assert calculate_change_rate(yesterday, today) == expected

    def test_zero_yesterday_has_no_rate(self):
        assert calculate_change_rate(0.0, 50.0) is None

    def test_missing_cost_has_no_rate(self):
        assert calculate_change_rate(None, 50.0) is None
        assert calculate_change_rate(50.0, None) is None


class TestAnomalyDetector:
    """Tests for AnomalyDetector."""

    @pytest.fixture
    def detector(self):
        """Create a detector with test config."""
        return create_detector(40.0)

    def test_detect_large_increase(self, detector):
        """Test that 100 -> 150 is flagged at a 40% threshold."""
        record = CostRecord.from_costs("acme", "Compute Engine", 100.0, 150.0)
        anomalies = detector.detect([record])
        assert anomalies == [record]
        assert anomalies[0].change_rate == 50.0

    def test_small_increase_not_flagged(self, detector):
        """Test that 100 -> 110 is not flagged."""
        record = CostRecord.from_costs("acme", "Compute Engine", 100.0, 110.0)
        assert detector.detect([record]) == []

    def test_equal_to_threshold_not_flagged(self, detector):
        """Test that the comparison is strictly greater-than."""
        record = CostRecord.from_costs("acme", "Cloud Storage", 100.0, 140.0)
        assert record.change_rate == 40.0
        assert detector.detect([record]) == []

    @pytest.mark.parametrize("threshold", [-1000.0, -1.0, 0.0, 40.0])
    def test_zero_yesterday_never_flagged(self, threshold):
        """Test that a null change rate is skipped whatever the threshold."""
        record = CostRecord.from_costs("acme", "BigQuery", 0.0, 50.0)
        assert record.change_rate is None
        assert create_detector(threshold).detect([record]) == []

    def test_null_cost_never_flagged(self):
        record = CostRecord("acme", "BigQuery", None, 50.0, None)
        assert create_detector(-1000.0).detect([record]) == []

    def test_negative_threshold_flags_smaller_decreases(self):
        """Test that a negative threshold flags drops above it."""
        detector = create_detector(-50.0)
        small_drop = CostRecord.from_costs("acme", "Cloud Run", 100.0, 80.0)
        large_drop = CostRecord.from_costs("acme", "Cloud SQL", 100.0, 20.0)
        assert detector.detect([small_drop, large_drop]) == [small_drop]

    def test_order_preserved(self, detector):
        """Test that anomalies keep input order."""
        records = [
            CostRecord.from_costs("b-project", "Cloud Run", 10.0, 30.0),
            CostRecord.from_costs("a-project", "Cloud Run", 10.0, 11.0),
            CostRecord.from_costs("a-project", "Pub/Sub", 10.0, 20.0),
        ]
        assert detector.detect(records) == [records[0], records[2]]

    def test_empty_records(self, detector):
        assert detector.detect([]) == []


class TestAnomalySummary:
    """Tests for get_anomaly_summary."""

    def test_no_anomalies(self):
        assert "No anomalies" in create_detector(40.0).get_anomaly_summary([])

    def test_summary_names_highest(self):
        detector = create_detector(40.0)
        anomalies = [
            CostRecord.from_costs("acme", "Cloud Run", 10.0, 15.0),
            CostRecord.from_costs("acme", "Vertex AI", 10.0, 40.0),
        ]
        summary = detector.get_anomaly_summary(anomalies)
        assert "Detected 2 anomalies" in summary
        assert "Vertex AI" in summary
        assert "+300.00%" in summary
