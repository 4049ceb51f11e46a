"""Field filters applied to parsed entries."""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Sequence

from .models import FilterOperator, FilterPredicate, LogEntry
from .values import to_number, value_text

_NUMERIC_OPS: dict[FilterOperator, Callable[[float, float], bool]] = {
    FilterOperator.GT: operator.gt,
    FilterOperator.LT: operator.lt,
    FilterOperator.GTE: operator.ge,
    FilterOperator.LTE: operator.le,
}


def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def _text_test(pred: FilterPredicate) -> Callable[[str], bool]:
    if pred.operator is FilterOperator.EQUALS:
        return lambda text: text == pred.value
    if pred.operator is FilterOperator.CONTAINS:
        return lambda text: pred.value in text

    compiled = _compile(pred.value)
    if compiled is None:
        return lambda text: False
    return lambda text: compiled.search(text) is not None


def _matcher(pred: FilterPredicate) -> Callable[[LogEntry], bool]:
    """Build the test for one predicate; a missing field never matches."""
    if pred.operator in _NUMERIC_OPS:
        compare = _NUMERIC_OPS[pred.operator]
        target = to_number(pred.value)

        def numeric(entry: LogEntry) -> bool:
            value = to_number(entry.fields.get(pred.field))
            if value is None or target is None:
                return False
            return compare(value, target)

        return numeric

    test = _text_test(pred)

    def textual(entry: LogEntry) -> bool:
        value = entry.fields.get(pred.field)
        if value is None:
            return False
        return test(value_text(value))

    return textual


def apply_filters(
    entries: Iterable[LogEntry],
    predicates: Sequence[FilterPredicate],
) -> list[LogEntry]:
    """Keep entries that satisfy every predicate."""
    if not predicates:
        return list(entries)
    matchers = [_matcher(p) for p in predicates]
    return [e for e in entries if all(m(e) for m in matchers)]
