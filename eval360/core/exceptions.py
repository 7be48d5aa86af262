"""
Custom Exceptions - 360 Evaluation Scoring Engine
eval360/core/exceptions.py

Only structural problems with the input are raised. Data-quality problems
(too few responses, anonymity not met) are reported as validation errors on
the aggregation result instead.
"""

from typing import List, Optional


class Eval360Exception(Exception):
    """Base exception for the scoring engine."""

    pass


class InputError(Eval360Exception):
    """Test definition or rule set is structurally malformed."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.message = message
        self.problems = problems or []
        if self.problems:
            message = f"{message}: {'; '.join(self.problems)}"
        super().__init__(message)


class AggregationNotFoundException(Eval360Exception):
    """No aggregation record exists for the session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Aggregation for session {session_id} not found")

