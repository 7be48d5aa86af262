"""
scoring/ — 360 Evaluation Scoring Engine

Modules:
    utils.py                   - Rounding and answer coercion helpers
    normalizer.py              - Scale Normalizer (negative-question reflection)
    statistics.py              - Mean / median / mode / std dev / consensus
    conditional_rules.py       - Conditional Rule Evaluator (category exclusion)
    subdimension_aggregator.py - Weighted subdimension score
    category_aggregator.py     - Category rollup over subdimensions
    score_tree.py              - Category / subdimension tree for one answer set
    anonymity.py               - Anonymity Gate
    evaluator_scores.py        - Evaluator-Type Score Aggregator
    composer.py                - Overall Score Composer
    insights.py                - Strengths, weaknesses, self-other gap
    orchestrator.py            - Aggregation Orchestrator (full pipeline)
"""
