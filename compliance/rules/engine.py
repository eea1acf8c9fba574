"""
Market Rule Engine

Maps a market code (US, EU, FR, ...) to an ordered tuple of rules.
The mapping is built once and is read-only afterwards, so one engine can
be shared by every request.
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from compliance.models import Issue, ValidationRequest

logger = logging.getLogger(__name__)

DEFAULT_MARKETS = ("US",)


class Rule(ABC):
    """
    A single market rule.

    Rules inspect the raw request and return zero or more issues.
    They must not mutate the request.
    """

    id: str = ""

    @abstractmethod
    def evaluate(self, request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"


class FunctionRule(Rule):
    """Wraps a plain ``fn(request, context) -> List[Issue]`` as a Rule."""

    def __init__(self, rule_id: str, fn: Callable[[ValidationRequest, Dict[str, Any]], List[Issue]]):
        self.id = rule_id
        self.fn = fn

    def evaluate(self, request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
        return self.fn(request, context)


def rule(rule_id: str):
    """Decorator turning a rule function into a FunctionRule."""
    def wrap(fn):
        return FunctionRule(rule_id, fn)
    return wrap


class RuleEngine:
    def __init__(self, registry: Mapping[str, Iterable[Rule]]):
        frozen = {market.strip().upper(): tuple(rules) for market, rules in registry.items()}
        self._registry = MappingProxyType(frozen)

    @property
    def markets(self) -> List[str]:
        return list(self._registry.keys())

    def rules_for(self, market: str) -> tuple:
        """Rules registered for a market; unknown markets get an empty tuple."""
        return self._registry.get((market or "").strip().upper(), ())

    def execute(self, request: ValidationRequest, markets: Optional[List[str]] = None) -> List[Issue]:
        """
        Run every rule of every requested market, in order.

        A rule that raises is logged and skipped; the other rules and
        markets still run. Issues are deduplicated by id across the run.
        """
        issues: List[Issue] = []
        seen = set()

        for market in markets or list(DEFAULT_MARKETS):
            rules = self.rules_for(market)
            if not rules:
                logger.debug("No rules registered for market %s", market)
                continue
            context = {"market": market.strip().upper()}
            for market_rule in rules:
                try:
                    found = market_rule.evaluate(request, context)
                except Exception:
                    logger.exception("Error executing rule %s for market %s", market_rule.id, market)
                    continue
                for issue in found or []:
                    if issue.id in seen:
                        continue
                    seen.add(issue.id)
                    issues.append(issue)

        return issues
