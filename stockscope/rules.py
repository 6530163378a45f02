# stockscope/rules.py
"""Declarative threshold tables.

A ``Chain`` is an ordered tuple of ``Rule`` objects: the first rule whose
predicate holds fires and the rest of that chain is skipped. Chains are
independent of each other and their adjustments stack, so a category is
simply a tuple of chains evaluated in declared order.
"""
from __future__ import annotations
from typing import Any, Callable, List, NamedTuple, Sequence, Tuple


class Rule(NamedTuple):
    predicate: Callable[[Any], bool]
    adjustment: float
    label: str = ""

    def describe(self, subject: Any) -> str:
        # labels may reference attributes of the subject, e.g. "P/E ratio of {pe_text}"
        if isinstance(subject, dict):
            return self.label.format(**subject)
        if hasattr(subject, "model_dump"):
            return self.label.format(**subject.model_dump())
        return self.label.format(**vars(subject))


Chain = Tuple[Rule, ...]


def first_match(chain: Chain, subject: Any):
    for rule in chain:
        if rule.predicate(subject):
            return rule
    return None


def evaluate(chains: Sequence[Chain], subject: Any) -> Tuple[float, List[Rule]]:
    """Total adjustment of ``chains`` for ``subject`` plus the rules that fired, in order."""
    total = 0.0
    fired: List[Rule] = []
    for chain in chains:
        rule = first_match(chain, subject)
        if rule is not None:
            total += rule.adjustment
            fired.append(rule)
    return total, fired


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
