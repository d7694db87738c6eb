"""Domain services - stateless engine logic."""

from segment_db.domain.services.predicate_evaluator import PredicateEvaluator

__all__ = ["PredicateEvaluator"]
