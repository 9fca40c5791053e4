"""Tests for chararray.profiling — allocation accounting API."""

from chararray import AlignedCharArray, AlignedGrowableBuffer, CharArray, GrowableBuffer
from chararray.profiling import (
    AllocationAccumulator,
    get_allocation_accumulator,
    profiled_allocations,
)


class TestGetAllocationAccumulator:
    def test_returns_none_when_disabled(self) -> None:
        assert get_allocation_accumulator() is None

    def test_returns_none_outside_context(self) -> None:
        with profiled_allocations():
            pass
        assert get_allocation_accumulator() is None


class TestProfiledAllocations:
    def test_yields_accumulator(self) -> None:
        with profiled_allocations() as acc:
            assert isinstance(acc, AllocationAccumulator)
            assert get_allocation_accumulator() is acc

    def test_records_allocation(self) -> None:
        with profiled_allocations() as acc:
            GrowableBuffer(16)
        assert acc.allocations == 1
        assert acc.bytes_allocated == 16

    def test_records_doubling(self) -> None:
        with profiled_allocations() as acc:
            buf = GrowableBuffer(1)
            buf.extend(b"x")
            for _ in range(7):
                buf.push(b"x")
        # 1 -> 2 -> 4 -> 8
        assert acc.reallocations == 3
        assert acc.bytes_allocated == 1 + 2 + 4 + 8

    def test_records_free(self) -> None:
        with profiled_allocations() as acc:
            CharArray().cat("x").destroy()
        assert acc.frees == 1

    def test_aligned_growth_copies(self) -> None:
        with profiled_allocations() as acc:
            buf = AlignedGrowableBuffer(2, alignment=16)
            buf.extend(b"abcde")
        assert acc.allocations == 1
        assert acc.reallocations == 1
        assert acc.frees == 1
        assert acc.bytes_copied == 0

    def test_aligned_builder_growth_is_reallocation(self) -> None:
        with profiled_allocations() as acc:
            AlignedCharArray(1).cat("x" * 100)
        assert acc.allocations == 1
        assert acc.reallocations >= 1
        assert acc.frees == acc.reallocations

    def test_no_recording_outside_context(self) -> None:
        with profiled_allocations() as acc:
            pass
        GrowableBuffer(4).extend(b"x" * 10)
        assert acc.summary()["allocations"] == 0


class TestSummary:
    def test_empty_summary(self) -> None:
        summary = AllocationAccumulator().summary()
        assert summary == {
            "allocations": 0,
            "reallocations": 0,
            "frees": 0,
            "bytes_allocated": 0,
            "bytes_copied": 0,
        }

    def test_summary_after_building(self) -> None:
        with profiled_allocations() as acc:
            CharArray(1).cat("hello world")
        summary = acc.summary()
        assert summary["allocations"] == 1
        assert summary["reallocations"] >= 1
