#!/usr/bin/env python3
"""
Scoring Module - per-path eligibility scores.

Public API:
- PathScorer: scores one applicant for one path
- parse_applicant_data / parse_scoring_config: boundary parsers

Modules:
- models.py: typed applicant data and config variants, one per path type
- formulas.py: pure scoring formulas
- service.py: PathScorer dispatcher
"""

from core.scorer.models import (
    ProximityData, AchievementData, AffirmativeData, ParentTransferData,
    ProximityConfig, AchievementConfig, AffirmativeConfig, ParentTransferConfig,
    parse_applicant_data, parse_scoring_config,
)
from core.scorer.service import PathScorer

__all__ = [
    'PathScorer',
    'ProximityData',
    'AchievementData',
    'AffirmativeData',
    'ParentTransferData',
    'ProximityConfig',
    'AchievementConfig',
    'AffirmativeConfig',
    'ParentTransferConfig',
    'parse_applicant_data',
    'parse_scoring_config',
]
