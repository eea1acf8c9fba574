from compliance.rules.engine import RuleEngine
from compliance.rules.us import US_RULES
from compliance.rules.eu import EU_RULES
from compliance.rules.fr import FR_RULES

DEFAULT_REGISTRY = {
    "US": US_RULES,
    "EU": EU_RULES,
    "FR": EU_RULES + FR_RULES,
}


def build_default_rule_engine() -> RuleEngine:
    """US, EU and FR rule sets. FR runs the EU rules first."""
    return RuleEngine(DEFAULT_REGISTRY)
