"""
Conditional Rule Evaluator
eval360/scoring/conditional_rules.py

Decides which categories drop out of scoring for one answer set.

Comparison semantics (answers arrive as mixed types from different widgets):
    equals / not_equals        loose: "5" == 5, "true" == True, 5.0 == "5"
    greater_than / less_than   numeric; a non-numeric side never matches
    missing or blank answer    rule does not fire
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

import structlog

from eval360.models.aggregation import ActiveRule
from eval360.models.enumerations import RuleAction, RuleOperator
from eval360.models.test_definition import ConditionalRule, QuestionBase, TestDefinition
from eval360.scoring.utils import is_answered, to_number, to_text

logger = structlog.get_logger(__name__)

_OPERATOR_LABELS: Dict[RuleOperator, str] = {
    RuleOperator.EQUALS: "equals",
    RuleOperator.NOT_EQUALS: "is not",
    RuleOperator.GREATER_THAN: "is greater than",
    RuleOperator.LESS_THAN: "is less than",
}


def _loosely_equal(answer: Any, expected: Any) -> bool:
    if to_text(answer) == to_text(expected):
        return True
    a, b = to_number(answer), to_number(expected)
    return a is not None and b is not None and a == b


class ConditionalRuleEvaluator:
    """Evaluate conditional rules against a ``{question_id: value}`` answer map."""

    def evaluate(self, rule: Optional[ConditionalRule], answers: Mapping[str, Any]) -> bool:
        if rule is None:
            return False

        condition = rule.condition
        answer = answers.get(condition.question_id)
        if not is_answered(answer):
            return False

        if condition.operator == RuleOperator.EQUALS:
            return _loosely_equal(answer, condition.value)
        if condition.operator == RuleOperator.NOT_EQUALS:
            return not _loosely_equal(answer, condition.value)

        a, b = to_number(answer), to_number(condition.value)
        if a is None or b is None:
            return False
        if condition.operator == RuleOperator.GREATER_THAN:
            return a > b
        if condition.operator == RuleOperator.LESS_THAN:
            return a < b
        return False

    def get_excluded_categories(
        self,
        test_definition: TestDefinition,
        answers: Mapping[str, Any],
    ) -> Set[str]:
        """
        Union of categories excluded by their own rule and by legacy
        top-level rules. ``mark_as_not_applicable`` only affects reporting,
        so legacy rules with that action never exclude.
        """
        excluded: Set[str] = set()

        for category in test_definition.categories:
            if category.is_conditional and self.evaluate(category.conditional_rule, answers):
                excluded.add(category.id)

        for rule in test_definition.conditional_rules:
            if (
                rule.action == RuleAction.EXCLUDE_FROM_SCORING
                and rule.category_id is not None
                and self.evaluate(rule, answers)
            ):
                excluded.add(rule.category_id)

        if excluded:
            logger.debug(
                "categories_excluded",
                test_id=test_definition.id,
                excluded=sorted(excluded),
            )
        return excluded

    def get_active_rules(
        self,
        test_definition: TestDefinition,
        answers: Mapping[str, Any],
    ) -> List[ActiveRule]:
        """Every category rule that fired, with the answer that triggered it."""
        active: List[ActiveRule] = []
        for category in test_definition.categories:
            rule = category.conditional_rule
            if not (category.is_conditional and self.evaluate(rule, answers)):
                continue
            question = test_definition.question(rule.condition.question_id)
            active.append(
                ActiveRule(
                    category_id=category.id,
                    category_name=category.name,
                    question_id=rule.condition.question_id,
                    question_text=question.text if question else rule.condition.question_id,
                    operator=rule.condition.operator,
                    value=rule.condition.value,
                    action=rule.action,
                    user_answer=answers.get(rule.condition.question_id),
                )
            )
        return active

    def describe(self, rule: Optional[ConditionalRule], questions: Sequence[QuestionBase]) -> str:
        """Human-readable exclusion reason, e.g. ``Excluded: "Do you manage a team?" equals "No"``."""
        if rule is None:
            return "Excluded by conditional rule"
        condition = rule.condition
        question = next((q for q in questions if q.id == condition.question_id), None)
        question_text = question.text if question and question.text else condition.question_id
        label = _OPERATOR_LABELS.get(condition.operator, condition.operator.value)
        return f'Excluded: "{question_text}" {label} "{to_text(condition.value)}"'
