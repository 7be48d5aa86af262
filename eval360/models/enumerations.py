from enum import Enum

class EvaluatorType(str, Enum):
    SELF = "self"                  # Evaluatee rating themselves
    MANAGER = "manager"            # Direct manager
    PEER = "peer"                  # Same-level colleague
    SUBORDINATE = "subordinate"    # Direct report
    EXTERNAL = "external"          # Client, supplier, partner

class QuestionType(str, Enum):
    LIKERT = "likert"
    BOOLEAN = "boolean"
    MULTIPLE_CHOICE = "multiple-choice"
    OPEN_TEXT = "open-text"

class RuleOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"

class RuleAction(str, Enum):
    EXCLUDE_FROM_SCORING = "exclude_from_scoring"
    MARK_AS_NOT_APPLICABLE = "mark_as_not_applicable"

class ResponseStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"

class AggregationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class OverallScoreMode(str, Enum):
    EVALUATOR_TYPE = "evaluator_type"  # 360 aggregation: weighted by rater relationship
    CATEGORY = "category"              # Individual report: category/subdimension rollup
