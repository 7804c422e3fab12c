"""Per-poll orchestration of the live analyzers."""

from live_hedge.pipeline.evaluator import LivePickEvaluator, PickEvaluation, PollSummary

__all__ = ["LivePickEvaluator", "PickEvaluation", "PollSummary"]
