"""Application services: condition evaluation and variable substitution."""

from app.application.services.condition_evaluator import (
    MISSING,
    evaluate_condition,
    evaluate_conditions,
    resolve_field,
)
from app.application.services.variable_substitution import (
    replace_variables,
    replace_variables_in,
    stringify,
)

__all__ = [
    "MISSING",
    "evaluate_condition",
    "evaluate_conditions",
    "replace_variables",
    "replace_variables_in",
    "resolve_field",
    "stringify",
]
