"""
Security-aware repository harvesting: path validation, ignore rules,
secret detection and limit-bounded traversal.
"""

from vectorizer.repository.validator import (
    PathValidator,
    RepositoryLimits,
    RepositoryStats,
    ValidationFailure,
    ValidationSuccess,
)

__all__ = [
    "HarvestResult",
    "HarvestState",
    "IgnoreRuleResolver",
    "PathValidator",
    "RepositoryHarvester",
    "RepositoryLimits",
    "RepositoryStats",
    "SensitiveContentFilter",
    "ValidationFailure",
    "ValidationSuccess",
]


def __getattr__(name):
    if name in ("HarvestResult", "HarvestState", "RepositoryHarvester"):
        from vectorizer.repository import harvester
        return getattr(harvester, name)
    if name == "IgnoreRuleResolver":
        from vectorizer.repository.ignore import IgnoreRuleResolver
        return IgnoreRuleResolver
    if name == "SensitiveContentFilter":
        from vectorizer.repository.sensitive import SensitiveContentFilter
        return SensitiveContentFilter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
