"""
Data Ingestion Module

Handles fetching and validating snapshot data from external sources:
- DexScreener for Solana pair metrics
- LetsBonk.fun for launch flags and launch times
- Canonical identity resolution and boundary validation
"""

__version__ = "0.1.0"
