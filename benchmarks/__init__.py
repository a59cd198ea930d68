"""Performance benchmarks for qregister.

This package contains microbenchmarks for hot paths in the library,
starting with dense versus tensor operator application.
"""
