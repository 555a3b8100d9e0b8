"""Schedule diagnostics: severities, codes, analyzers and the validator."""

from .codes import DiagnosticCode
from .frequency import (
    REFERENCE_DATE,
    FrequencyAnalyzer,
    detect_redundant_pattern,
    redundant_pattern_suggestion,
)
from .hygiene import CommandHygieneChecker
from .models import Issue, Overlap, OverlapStats, ValidationResult
from .overlap import DEFAULT_OVERLAP_WINDOW, OverlapAnalyzer
from .severity import Severity, parse_fail_on_level
from .stats import CrontabStats, HourCount, JobFrequency, StatsCalculator
from .validator import DEFAULT_MAX_RUNS_PER_DAY, Validator, detect_dom_dow_conflict

__all__ = [
    "DEFAULT_MAX_RUNS_PER_DAY",
    "DEFAULT_OVERLAP_WINDOW",
    "REFERENCE_DATE",
    "CommandHygieneChecker",
    "CrontabStats",
    "DiagnosticCode",
    "FrequencyAnalyzer",
    "HourCount",
    "Issue",
    "JobFrequency",
    "Overlap",
    "OverlapAnalyzer",
    "OverlapStats",
    "Severity",
    "StatsCalculator",
    "ValidationResult",
    "Validator",
    "detect_dom_dow_conflict",
    "detect_redundant_pattern",
    "parse_fail_on_level",
    "redundant_pattern_suggestion",
]
