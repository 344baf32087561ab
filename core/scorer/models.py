#!/usr/bin/env python3
"""
Scoring Models - typed applicant data and scoring configuration per path type.

Registrations carry an open-ended ``path_data`` bag and every path carries an
open-ended ``scoring_config`` bag. Both are parsed exactly once, here, into
one frozen dataclass per path type. Formulas downstream only see typed
fields.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from core.enums import PathType
from core.exceptions import ScoringValidationError

logger = logging.getLogger(__name__)


# ----------------------------
# Applicant data variants
# ----------------------------
@dataclass(frozen=True)
class ProximityData:
    distance_km: float


@dataclass(frozen=True)
class AchievementData:
    rapor_average: float
    achievement_points: float = 0.0


@dataclass(frozen=True)
class AffirmativeData:
    has_kip: bool = False
    is_poor_family: bool = False
    has_disability: bool = False
    rapor_average: Optional[float] = None


@dataclass(frozen=True)
class ParentTransferData:
    has_transfer_letter: bool = False
    has_parent_assignment: bool = False


ApplicantData = Union[ProximityData, AchievementData, AffirmativeData, ParentTransferData]


# ----------------------------
# Scoring config variants
# ----------------------------
@dataclass(frozen=True)
class ProximityConfig:
    distance_weight: float = 2.0


@dataclass(frozen=True)
class AchievementConfig:
    rapor_weight: float = 0.7
    achievement_weight: float = 0.3


@dataclass(frozen=True)
class AffirmativeConfig:
    base_score: float = 50.0
    kip_bonus: float = 20.0
    poor_family_bonus: float = 15.0
    disability_bonus: float = 15.0
    rapor_weight: float = 0.3


@dataclass(frozen=True)
class ParentTransferConfig:
    base_score: float = 60.0
    transfer_letter_bonus: float = 20.0
    parent_assignment_bonus: float = 20.0


ScoringConfig = Union[ProximityConfig, AchievementConfig, AffirmativeConfig, ParentTransferConfig]


# ----------------------------
# Helpers
# ----------------------------
def _as_number(raw: Any) -> Optional[float]:
    # bool is an int subclass; a JSON true is not a number
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    value = float(raw)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _flag(data: Mapping[str, Any], key: str) -> bool:
    return data.get(key) is True


def _cfg_float(config: Mapping[str, Any], name: str, default: float) -> float:
    if name not in config:
        return default
    value = _as_number(config[name])
    if value is None:
        logger.warning("Invalid scoring config %s=%r; using default=%r", name, config[name], default)
        return default
    return value


def _require_number(data: Mapping[str, Any], key: str, path_label: str) -> float:
    value = _as_number(data.get(key))
    if value is None:
        raise ScoringValidationError(
            f"{key} is required and must be numeric for the {path_label} path",
            field=key,
        )
    return value


# ----------------------------
# Boundary parsers
# ----------------------------
def parse_applicant_data(path_type: PathType, path_data: Optional[Mapping[str, Any]]) -> ApplicantData:
    """Parse a registration's path_data bag into the variant for ``path_type``.

    Raises:
        ScoringValidationError: if a required field is missing or out of range.
    """
    data = path_data or {}

    if path_type is PathType.PROXIMITY:
        return ProximityData(distance_km=_require_number(data, 'distance_km', 'proximity'))

    if path_type is PathType.ACHIEVEMENT:
        rapor = _require_number(data, 'rapor_average', 'achievement')
        if rapor < 0.0 or rapor > 100.0:
            raise ScoringValidationError(
                "rapor_average must be between 0 and 100", field='rapor_average'
            )
        points = _as_number(data.get('achievement_points'))
        return AchievementData(
            rapor_average=rapor,
            achievement_points=points if points is not None else 0.0,
        )

    if path_type is PathType.AFFIRMATIVE:
        return AffirmativeData(
            has_kip=_flag(data, 'has_kip'),
            is_poor_family=_flag(data, 'is_poor_family'),
            has_disability=_flag(data, 'has_disability'),
            rapor_average=_as_number(data.get('rapor_average')),
        )

    if path_type is PathType.PARENT_TRANSFER:
        return ParentTransferData(
            has_transfer_letter=_flag(data, 'has_transfer_letter'),
            has_parent_assignment=_flag(data, 'has_parent_assignment'),
        )

    raise ScoringValidationError(f"Unknown path type: {path_type!r}")


def parse_scoring_config(path_type: PathType, scoring_config: Optional[Mapping[str, Any]]) -> ScoringConfig:
    """Parse a path's scoring_config bag, falling back to defaults per key."""
    cfg = scoring_config or {}

    if path_type is PathType.PROXIMITY:
        return ProximityConfig(
            distance_weight=_cfg_float(cfg, 'distance_weight', ProximityConfig.distance_weight),
        )

    if path_type is PathType.ACHIEVEMENT:
        return AchievementConfig(
            rapor_weight=_cfg_float(cfg, 'rapor_weight', AchievementConfig.rapor_weight),
            achievement_weight=_cfg_float(cfg, 'achievement_weight', AchievementConfig.achievement_weight),
        )

    if path_type is PathType.AFFIRMATIVE:
        return AffirmativeConfig(
            kip_bonus=_cfg_float(cfg, 'kip_bonus', AffirmativeConfig.kip_bonus),
            poor_family_bonus=_cfg_float(cfg, 'poor_family_bonus', AffirmativeConfig.poor_family_bonus),
            disability_bonus=_cfg_float(cfg, 'disability_bonus', AffirmativeConfig.disability_bonus),
            rapor_weight=_cfg_float(cfg, 'rapor_weight', AffirmativeConfig.rapor_weight),
        )

    if path_type is PathType.PARENT_TRANSFER:
        return ParentTransferConfig(
            transfer_letter_bonus=_cfg_float(
                cfg, 'transfer_letter_bonus', ParentTransferConfig.transfer_letter_bonus
            ),
            parent_assignment_bonus=_cfg_float(
                cfg, 'parent_assignment_bonus', ParentTransferConfig.parent_assignment_bonus
            ),
        )

    raise ScoringValidationError(f"Unknown path type: {path_type!r}")
