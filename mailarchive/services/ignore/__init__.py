"""Ignore rule evaluation."""

from .rule_evaluator import SKIP_HEADER, IgnoreRuleEvaluator, is_truthy

__all__ = ["SKIP_HEADER", "IgnoreRuleEvaluator", "is_truthy"]
