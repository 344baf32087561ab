#!/usr/bin/env python3
"""
Path scoring formulas.

One pure function per path type. Every result is clamped to [0, 100] and
quantized to two decimals, the precision selection_score is stored with.

- Proximity:       100 - distance_km * distance_weight
- Achievement:     rapor_average * rapor_weight + achievement_points * achievement_weight
- Affirmative:     50 + flag bonuses + rapor_average * rapor_weight (when present)
- ParentTransfer:  60 + document bonuses
"""

from __future__ import annotations

from core.scorer.models import (
    ProximityData, ProximityConfig,
    AchievementData, AchievementConfig,
    AffirmativeData, AffirmativeConfig,
    ParentTransferData, ParentTransferConfig,
)

MIN_SCORE = 0.0
MAX_SCORE = 100.0
SCORE_DECIMALS = 2


def _clamp(x: float, lo: float = MIN_SCORE, hi: float = MAX_SCORE) -> float:
    return max(lo, min(hi, x))


def finalize(score: float) -> float:
    """Clamp to the score range and round to storage precision."""
    return round(_clamp(score), SCORE_DECIMALS)


def proximity_score(data: ProximityData, config: ProximityConfig) -> float:
    # Closer distance = higher score
    return finalize(MAX_SCORE - data.distance_km * config.distance_weight)


def achievement_score(data: AchievementData, config: AchievementConfig) -> float:
    raw = (
        data.rapor_average * config.rapor_weight
        + data.achievement_points * config.achievement_weight
    )
    return finalize(raw)


def affirmative_score(data: AffirmativeData, config: AffirmativeConfig) -> float:
    score = config.base_score
    if data.has_kip:
        score += config.kip_bonus
    if data.is_poor_family:
        score += config.poor_family_bonus
    if data.has_disability:
        score += config.disability_bonus
    if data.rapor_average is not None:
        score += data.rapor_average * config.rapor_weight
    return finalize(score)


def parent_transfer_score(data: ParentTransferData, config: ParentTransferConfig) -> float:
    score = config.base_score
    if data.has_transfer_letter:
        score += config.transfer_letter_bonus
    if data.has_parent_assignment:
        score += config.parent_assignment_bonus
    return finalize(score)
