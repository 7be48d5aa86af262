"""
Services module for the 360 Evaluation Scoring Engine.
"""

from eval360.services.aggregation_service import AggregationService

__all__ = [
    "AggregationService",
]
