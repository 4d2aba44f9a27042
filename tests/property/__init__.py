"""Property-based tests using Hypothesis.

These tests use generative testing to explore edge cases:
- Migration idempotence over arbitrary legacy snapshots
- Merge union preservation and last-writer-wins resolution

To run property tests:
    pytest tests/property/ -v --hypothesis-show-statistics

Requires:
    hypothesis>=6.100.0
"""
