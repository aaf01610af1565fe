"""
Test Suite for the Solana Token Tracker

Includes:
- Unit tests for statistics, trends, scoring and cohort analysis
- Integration tests for the daily and weekly pipelines
- Recorded DexScreener responses under fixtures/
"""
