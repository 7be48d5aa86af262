"""360 evaluation scoring and aggregation engine."""
