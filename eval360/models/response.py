from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eval360.models.enumerations import EvaluatorType, ResponseStatus

AnswerValue = Optional[Union[bool, float, str]]


class Answer(BaseModel):
    """
    One submitted answer. Immutable; a resubmission is a new response.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    question_id: Optional[str] = None
    value: AnswerValue = None
    answered_at: Optional[datetime] = None


class EvaluatorResponse(BaseModel):
    """
    One evaluator's submission for one 360 session.

    ``answers`` maps question id to an ``Answer``; bare values
    (``{"q1": 4}``) are accepted and wrapped.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    evaluator_id: str
    evaluator_type: EvaluatorType
    status: ResponseStatus = ResponseStatus.SUBMITTED
    test_version: Optional[str] = None
    answers: Dict[str, Answer] = Field(default_factory=dict)

    @field_validator("answers", mode="before")
    @classmethod
    def wrap_bare_values(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        wrapped = {}
        for question_id, answer in value.items():
            if isinstance(answer, (dict, Answer)):
                wrapped[question_id] = answer
            else:
                wrapped[question_id] = {"questionId": question_id, "value": answer}
        return wrapped

    @property
    def is_submitted(self) -> bool:
        return self.status == ResponseStatus.SUBMITTED

    def answer_values(self) -> Dict[str, AnswerValue]:
        """Plain ``{question_id: value}`` view used by the rule evaluator and score tree."""
        return {question_id: answer.value for question_id, answer in self.answers.items()}
