"""Reviewfile evaluation engine."""

from velvet.engine.context import ReviewContext
from velvet.engine.evaluator import (
    EvaluationResult,
    Evaluator,
    EvaluatorOptions,
    RuleFailed,
    RuleSucceeded,
    invoke_rule,
    invoke_rule_async,
    run_evaluation,
)
from velvet.engine.loader import (
    InvalidRuleModule,
    ReviewFileInfo,
    RuleFileNotFound,
    RuleModuleNotFound,
    RuleShapeError,
    RuleSyntaxError,
    load_rule_function,
    locate_rule_file,
    validate_rule_file,
)

__all__ = [
  "EvaluationResult",
  "Evaluator",
  "EvaluatorOptions",
  "InvalidRuleModule",
  "ReviewContext",
  "ReviewFileInfo",
  "RuleFailed",
  "RuleFileNotFound",
  "RuleModuleNotFound",
  "RuleShapeError",
  "RuleSucceeded",
  "RuleSyntaxError",
  "invoke_rule",
  "invoke_rule_async",
  "load_rule_function",
  "locate_rule_file",
  "run_evaluation",
  "validate_rule_file",
]
