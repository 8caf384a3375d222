"""
Unit tests for the CPU and memory percentage calculators.
"""

import pytest

from containermon.metrics.percent import cpu_percent, memory_percent, processor_count
from containermon.models import CpuCounters, MemoryCounters
from containermon.validation import DataUnavailable


def counters(busy, total, per_cpu=None, online=None):
    return CpuCounters(busy_time=busy, total_time=total, per_processor_usage=per_cpu, online_cpus=online)


@pytest.mark.unit
class TestProcessorCount:
    """Test cases for deriving the processor count."""

    def test_per_processor_list_wins(self):
        assert processor_count(counters(0, 0, per_cpu=[1, 2, 3, 4], online=2)) == 4

    def test_falls_back_to_online_cpus(self):
        assert processor_count(counters(0, 0, online=6)) == 6

    def test_none_when_nothing_reported(self):
        assert processor_count(counters(0, 0)) is None
        assert processor_count(counters(0, 0, per_cpu=[])) is None


@pytest.mark.unit
class TestCpuPercent:
    """Test cases for cpu_percent."""

    def test_half_busy_on_two_processors(self):
        previous = counters(100, 1000, per_cpu=[1, 1])
        current = counters(150, 1100, per_cpu=[1, 1])

        assert cpu_percent(current, previous) == pytest.approx(100.0)

    def test_fully_busy_multi_processor_exceeds_100(self):
        previous = counters(0, 0, per_cpu=[1, 1])
        current = counters(100, 100, per_cpu=[1, 1])

        assert cpu_percent(current, previous) == pytest.approx(200.0)

    def test_single_processor(self):
        previous = counters(0, 0, per_cpu=[1])
        current = counters(25, 100, per_cpu=[1])

        assert cpu_percent(current, previous) == pytest.approx(25.0)

    def test_idle_entity_reads_zero(self):
        previous = counters(100, 1000, per_cpu=[1])
        current = counters(100, 1100, per_cpu=[1])

        assert cpu_percent(current, previous) == 0.0

    def test_non_positive_total_delta_reads_zero(self):
        previous = counters(100, 1000, per_cpu=[1])
        current = counters(150, 1000, per_cpu=[1])

        assert cpu_percent(current, previous) == 0.0

    def test_counter_reset_reads_zero(self):
        previous = counters(5000, 9000, per_cpu=[1])
        current = counters(10, 9500, per_cpu=[1])

        assert cpu_percent(current, previous) == 0.0

    def test_uses_online_cpus_when_per_cpu_missing(self):
        previous = counters(0, 0, online=4)
        current = counters(10, 100, online=4)

        assert cpu_percent(current, previous) == pytest.approx(40.0)

    def test_missing_processor_count_raises(self):
        with pytest.raises(DataUnavailable):
            cpu_percent(counters(10, 100), counters(0, 0))


@pytest.mark.unit
class TestMemoryPercent:
    """Test cases for memory_percent."""

    def test_basic_ratio(self):
        assert memory_percent(MemoryCounters(usage=250, limit=1000)) == pytest.approx(25.0)

    def test_zero_limit_reads_zero(self):
        assert memory_percent(MemoryCounters(usage=250, limit=0)) == 0.0

    def test_unknown_limit_reads_zero(self):
        assert memory_percent(MemoryCounters(usage=250, limit=None)) == 0.0

    def test_clamped_to_100(self):
        assert memory_percent(MemoryCounters(usage=2000, limit=1000)) == 100.0

    def test_clamped_to_zero(self):
        assert memory_percent(MemoryCounters(usage=-5, limit=1000)) == 0.0
