"""
Repositories Package - 360 Evaluation Scoring Engine
eval360/repositories/__init__.py

Storage for per-session aggregation records.
"""

from eval360.repositories.aggregation_repository import AggregationRepository

__all__ = [
    "AggregationRepository",
]
