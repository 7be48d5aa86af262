"""
Scale Normalizer
eval360/scoring/normalizer.py

Maps a raw answer onto the value the aggregators accumulate:

    Likert:   value as-is, or (max + min) − value for negative questions;
              a stray True/False counts as 1/0
    Boolean questions:  True → 100, False → 0 (reflected for negative questions)
    Missing / non-numeric:  None

None means "unanswered" and must never be counted as the worst score.
Values outside [min, max] are passed through unclamped; range checks
belong to the UI that collected them.
"""

from typing import Any, Optional

from eval360.models.enumerations import QuestionType
from eval360.models.test_definition import Scale
from eval360.scoring.utils import to_number

BOOLEAN_TRUE = 100.0
BOOLEAN_FALSE = 0.0


class ScaleNormalizer:
    """Normalize raw answers against a questionnaire scale."""

    def normalize(
        self,
        raw_value: Any,
        is_negative: bool,
        scale: Scale,
        question_type: str = QuestionType.LIKERT,
    ) -> Optional[float]:
        """
        Args:
            raw_value: Answer as submitted (number, numeric string, bool or None).
            is_negative: Reverse-scored question.
            scale: Scale of the test definition.
            question_type: Only boolean questions use the 0/100 mapping.

        Returns:
            Normalized number, or None when there is nothing numeric to score.

        Examples:
            >>> n = ScaleNormalizer()
            >>> n.normalize(1, True, Scale(min=1, max=5))
            5.0
            >>> n.normalize(None, False, Scale(min=1, max=5)) is None
            True
        """
        value = to_number(raw_value)
        if value is None:
            return None

        if question_type == QuestionType.BOOLEAN:
            flag = value != 0
            if is_negative:
                flag = not flag
            return BOOLEAN_TRUE if flag else BOOLEAN_FALSE

        if is_negative:
            return (scale.max + scale.min) - value
        return value

    def to_percentage(self, value: Optional[float], scale: Scale) -> Optional[float]:
        """Express a scale value on 0..100, e.g. 4 on a 1-5 scale → 75."""
        if value is None:
            return None
        return (value - scale.min) / (scale.max - scale.min) * 100
