"""Benchmark CharArray appends against Python's own accumulators.

Compares strcat-style building on both backing buffers with bytearray
and list-then-join, and measures the printf retry loop from a tiny
starting capacity.

Run with:
    pytest benchmarks/benchmark_append.py -v --benchmark-only
"""

try:
    import pytest

    from chararray import AlignedCharArray, CharArray

    @pytest.mark.benchmark(group="append")
    def test_benchmark_chararray_cat(benchmark, fragments):
        """Benchmark cat() over a plain buffer."""

        def build():
            sb = CharArray()
            for fragment in fragments:
                sb.cat(fragment)
            return sb.to_string()

        benchmark(build)

    @pytest.mark.benchmark(group="append")
    def test_benchmark_aligned_cat(benchmark, fragments):
        """Benchmark cat() over an aligned buffer (copying growth)."""

        def build():
            sb = AlignedCharArray(alignment=64)
            for fragment in fragments:
                sb.cat(fragment)
            return sb.to_string()

        benchmark(build)

    @pytest.mark.benchmark(group="append")
    def test_benchmark_bytearray(benchmark, fragments):
        """Baseline: bytearray +=."""

        def build():
            out = bytearray()
            for fragment in fragments:
                out += fragment.encode()
            return bytes(out)

        benchmark(build)

    @pytest.mark.benchmark(group="append")
    def test_benchmark_list_join(benchmark, fragments):
        """Baseline: list append then join."""

        def build():
            parts = []
            for fragment in fragments:
                parts.append(fragment)
            return "".join(parts).encode()

        benchmark(build)

    @pytest.mark.benchmark(group="printf")
    def test_benchmark_cat_printf(benchmark):
        """Benchmark cat_printf growing from capacity 1."""

        def build():
            sb = CharArray(1)
            for i in range(1000):
                sb.cat_printf("%05d:%-20s|", i, "value")
            return sb.get_string()

        benchmark(build)

except ImportError:
    pass
