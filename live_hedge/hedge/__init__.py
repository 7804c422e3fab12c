"""Hedge decision engine: probability, thresholds, middle detection and the rule cascade."""

from live_hedge.hedge.engine import evaluate_hedge, effective_line, pre_game_action
from live_hedge.hedge.middle import find_middle_opportunity
from live_hedge.hedge.probability import dynamic_thresholds, hedge_sizing, hit_probability
from live_hedge.hedge.rules import HEDGE_RULES, HedgeContext, HedgeRule, RuleOutcome, select_rule

__all__ = [
    "evaluate_hedge",
    "effective_line",
    "pre_game_action",
    "find_middle_opportunity",
    "dynamic_thresholds",
    "hedge_sizing",
    "hit_probability",
    "HEDGE_RULES",
    "HedgeContext",
    "HedgeRule",
    "RuleOutcome",
    "select_rule",
]
