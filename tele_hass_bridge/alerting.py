"""Alert rule evaluation."""

from __future__ import annotations

import logging
import math
import operator as op
import re
from typing import Callable

from .models.alerts import AlertRule, Operator
from .models.hass_state import EntityState

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def comparison_text(value: object) -> str:
    """Render a rule comparison value the way it appears in chat text.

    `None` becomes an empty string and whole floats drop their `.0`, so a
    configured `30.0` matches a hub state of `"30"`.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(raw: object) -> float | None:
    """Parse a plain ASCII decimal such as `-1.5` or `2e3`; anything else is None."""
    text = comparison_text(raw).strip()
    if not _DECIMAL_RE.fullmatch(text):
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _numeric(compare: Callable[[float, float], bool]) -> Callable[[str, object], bool]:
    def check(current: str, expected: object) -> bool:
        left = to_number(current)
        right = to_number(expected)
        if left is None or right is None:
            return False
        return compare(left, right)

    return check


_COMPARATORS: dict[Operator, Callable[[str, object], bool]] = {
    Operator.GT: _numeric(op.gt),
    Operator.GTE: _numeric(op.ge),
    Operator.LT: _numeric(op.lt),
    Operator.LTE: _numeric(op.le),
    Operator.EQ: lambda current, expected: current == comparison_text(expected),
    Operator.NEQ: lambda current, expected: current != comparison_text(expected),
}


def evaluate_rule(
    rule: AlertRule, state: EntityState, prev_state: str | None = None
) -> bool:
    if not rule.enabled:
        return False
    if rule.operator is Operator.CHANGED:
        return prev_state is not None and state.state != prev_state
    compare = _COMPARATORS.get(rule.operator) if rule.operator else None
    if compare is None:
        return False
    return compare(state.state, rule.value)


def rule_entities(rules: list[AlertRule]) -> set[str]:
    """Entity ids referenced by enabled rules."""
    return {rule.entity for rule in rules if rule.enabled and rule.entity}


def describe_rule(rule: AlertRule) -> str:
    operator = rule.operator.value if rule.operator else "?"
    return f"{rule.entity} {operator} {comparison_text(rule.value)}".strip()
