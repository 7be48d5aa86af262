"""
Core Package - 360 Evaluation Scoring Engine
eval360/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.
"""

from eval360.core.exceptions import (
    AggregationNotFoundException,
    Eval360Exception,
    InputError,
)

__all__ = [
    # Exceptions
    "AggregationNotFoundException",
    "Eval360Exception",
    "InputError",
]
