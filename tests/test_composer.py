# tests/test_composer.py

"""
Evaluator-type scores, Overall Score Composer and report insights tests
"""

import pytest

from eval360.models.aggregation import SessionCategoryScore, TypeScore
from eval360.models.enumerations import EvaluatorType, OverallScoreMode
from eval360.models.policy import ScoringPolicy
from eval360.models.test_definition import Scale
from eval360.scoring.composer import OverallScoreComposer
from eval360.scoring.evaluator_scores import EvaluatorTypeScoreAggregator
from eval360.scoring.insights import InsightsBuilder
from eval360.scoring.orchestrator import AggregationOrchestrator


def type_score(evaluator_type, score, count=1, is_valid=True, **kwargs):
    return TypeScore(evaluator_type=evaluator_type, score=score, count=count, is_valid=is_valid, **kwargs)


# =============================================================================
# OVERALL COMPOSER
# =============================================================================

class TestOverallScoreComposer:

    def test_weighted_overall_example(self):
        scores = {
            EvaluatorType.MANAGER: type_score("manager", 4, count=2),
            EvaluatorType.PEER: type_score("peer", 3, count=5),
        }
        # (4*0.3 + 3*0.25) / 0.55
        assert OverallScoreComposer().compose(scores) == pytest.approx(3.5454545, rel=1e-6)

    def test_invalid_and_empty_types_are_skipped(self):
        scores = {
            EvaluatorType.MANAGER: type_score("manager", 4),
            EvaluatorType.PEER: type_score("peer", 1, is_valid=False),
            EvaluatorType.SUBORDINATE: type_score("subordinate", 1, count=0),
        }
        assert OverallScoreComposer().compose(scores) == pytest.approx(4.0)

    def test_nothing_valid_is_zero_not_nan(self):
        assert OverallScoreComposer().compose({}) == 0.0

    def test_policy_weights_are_used(self):
        policy = ScoringPolicy(evaluator_weights={"manager": 1.0, "peer": 0.0})
        scores = {
            EvaluatorType.MANAGER: type_score("manager", 4),
            EvaluatorType.PEER: type_score("peer", 1),
        }
        assert OverallScoreComposer(policy).compose(scores) == pytest.approx(4.0)

    def test_unknown_type_weight_fallback(self):
        policy = ScoringPolicy(evaluator_weights={"manager": 1.0}, unknown_type_weight=1.0)
        scores = {
            EvaluatorType.MANAGER: type_score("manager", 4),
            EvaluatorType.EXTERNAL: type_score("external", 2),
        }
        assert OverallScoreComposer(policy).compose(scores) == pytest.approx(3.0)

    def test_category_composition_skips_excluded(self):
        categories = [
            SessionCategoryScore(category_id="a", weight=2, score=4.0),
            SessionCategoryScore(category_id="b", weight=1, score=1.0),
            SessionCategoryScore(category_id="c", weight=5, score=None, is_excluded=True),
        ]
        assert OverallScoreComposer().compose_categories(categories) == pytest.approx(3.0)

    def test_headline_follows_policy_mode(self):
        assert OverallScoreComposer().headline(3.0, 4.0) == 3.0
        category_mode = ScoringPolicy(overall_score_mode=OverallScoreMode.CATEGORY)
        assert OverallScoreComposer(category_mode).headline(3.0, 4.0) == 4.0


# =============================================================================
# EVALUATOR-TYPE SCORES
# =============================================================================

class TestEvaluatorTypeScores:

    def test_mean_of_question_means(self, simple_definition, response_factory):
        responses = [
            response_factory("p1", "peer", {"q1": 5, "q2": 1}),  # normalized 5, 5
            response_factory("p2", "peer", {"q1": 3}),           # normalized 3
        ]
        result = AggregationOrchestrator().compute(simple_definition, responses)
        peer = result.scores_by_type[EvaluatorType.PEER]
        # q1 mean 4, q2 mean 5 -> 4.5 (not (5+3+5)/3)
        assert peer.score == pytest.approx(4.5)
        assert peer.count == 3
        assert peer.question_count == 2
        assert peer.evaluator_count == 2
        assert peer.weight == 0.25

    def test_only_present_types_in_declaration_order(self, simple_definition, response_factory):
        responses = [
            response_factory("p1", "peer", {"q1": 4}),
            response_factory("self", "self", {"q1": 5}),
        ]
        result = AggregationOrchestrator().compute(simple_definition, responses)
        assert list(result.scores_by_type) == [EvaluatorType.SELF, EvaluatorType.PEER]

    def test_type_without_numeric_answers_is_invalid(self, simple_definition, response_factory):
        responses = [response_factory("p1", "peer", {"q1": "n/a"})]
        result = AggregationOrchestrator().compute(simple_definition, responses)
        peer = result.scores_by_type[EvaluatorType.PEER]
        assert peer.is_valid is False
        assert peer.score is None

    def test_category_breakdown_per_type(self, leadership_definition, response_factory):
        responses = [
            response_factory("m1", "manager", {"q-manages": "yes", "q-g1": 4, "q-t1": 2}),
        ]
        result = AggregationOrchestrator().compute(leadership_definition, responses)
        manager = result.scores_by_type[EvaluatorType.MANAGER]
        assert manager.category_scores == {"c-general": pytest.approx(4.0), "c-team": pytest.approx(2.0)}

    def test_aggregator_without_trees(self):
        assert EvaluatorTypeScoreAggregator().by_type({}) == {}


# =============================================================================
# INSIGHTS
# =============================================================================

class TestInsights:

    def _categories(self, scores):
        return {
            cid: SessionCategoryScore(category_id=cid, category_name=cid.upper(), score=s)
            for cid, s in scores.items()
        }

    def test_strengths_and_weaknesses(self):
        categories = self._categories({"a": 3.0, "b": 4.5, "c": 2.0, "d": 4.0, "e": None})
        insights = InsightsBuilder().build(categories, {})
        assert [c.category_id for c in insights.strengths] == ["b", "d", "a"]
        assert [c.category_id for c in insights.weaknesses] == ["c", "a", "d"]
        assert [c.percentage for c in insights.strengths] == [87.5, 75.0, 50.0]

    def test_percentage_follows_the_test_scale(self):
        categories = self._categories({"a": 7.5})
        insights = InsightsBuilder().build(categories, {}, Scale(min=0, max=10))
        assert insights.strengths[0].percentage == 75.0

    def test_ties_keep_definition_order(self):
        categories = self._categories({"a": 3.0, "b": 3.0})
        insights = InsightsBuilder().build(categories, {})
        assert [c.category_id for c in insights.strengths] == ["a", "b"]
        assert [c.category_id for c in insights.weaknesses] == ["a", "b"]

    def test_self_other_gap(self):
        scores = {
            EvaluatorType.SELF: type_score("self", 4.5, category_scores={"a": 5.0}),
            EvaluatorType.MANAGER: type_score("manager", 3.0, category_scores={"a": 3.0}),
            EvaluatorType.PEER: type_score("peer", 4.0, category_scores={"a": 4.0}),
        }
        insights = InsightsBuilder().build({}, scores)
        others = (3.0 * 0.3 + 4.0 * 0.25) / 0.55
        assert insights.self_score == 4.5
        assert insights.others_score == pytest.approx(others)
        assert insights.self_other_gap == pytest.approx(4.5 - others)
        assert insights.category_gaps[0].gap == pytest.approx(5.0 - others)

    def test_no_self_evaluation(self):
        scores = {EvaluatorType.PEER: type_score("peer", 4.0)}
        insights = InsightsBuilder().build({}, scores)
        assert insights.self_score is None
        assert insights.self_other_gap is None
        assert insights.category_gaps == []
