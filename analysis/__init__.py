"""
Analysis Engine Module

Turns daily token snapshots into comparative analytics:
- Per-token time series (growth, volume consistency, volatility)
- Momentum, strength and sustainability trends with alerts
- Composite 0-100 score and ranking
- Cohort survival and daily market trends
"""

__version__ = "0.1.0"
