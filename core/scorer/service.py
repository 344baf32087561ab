#!/usr/bin/env python3
"""
Path Scorer - maps (applicant data, path type, scoring config) to a score.

Pure and deterministic: the same bags always produce the same score, and
nothing here touches the database. The SelectionService is responsible for
fetching registrations and persisting the result.
"""

from typing import Any, Mapping, Optional, Union
import logging

from core.enums import PathType
from core.exceptions import ScoringValidationError, ValidationException
from core.scorer import formulas
from core.scorer.models import (
    ApplicantData, ScoringConfig,
    ProximityData, ProximityConfig,
    AchievementData, AchievementConfig,
    AffirmativeData, AffirmativeConfig,
    ParentTransferData, ParentTransferConfig,
    parse_applicant_data, parse_scoring_config,
)

logger = logging.getLogger(__name__)


class PathScorer:
    """
    Computes the eligibility score of one applicant for one path.

    Usage:
        scorer = PathScorer()
        score = scorer.score({'distance_km': 2.5}, 'zonasi', {'distance_weight': 2.0})
        # 95.0
    """

    def score(
        self,
        path_data: Optional[Mapping[str, Any]],
        path_type: Union[PathType, str],
        scoring_config: Optional[Mapping[str, Any]] = None,
    ) -> float:
        """Parse both bags and score the applicant.

        Raises:
            ScoringValidationError: unknown path type, or missing/out-of-range
                required applicant field.
        """
        try:
            kind = PathType.parse(path_type)
        except ValidationException as e:
            raise ScoringValidationError(str(e), field='path_type') from e

        data = parse_applicant_data(kind, path_data)
        config = parse_scoring_config(kind, scoring_config)
        return self.score_typed(data, config)

    def score_typed(self, data: ApplicantData, config: ScoringConfig) -> float:
        """Score already-parsed data; the variant pair must agree."""
        if isinstance(data, ProximityData) and isinstance(config, ProximityConfig):
            return formulas.proximity_score(data, config)
        if isinstance(data, AchievementData) and isinstance(config, AchievementConfig):
            return formulas.achievement_score(data, config)
        if isinstance(data, AffirmativeData) and isinstance(config, AffirmativeConfig):
            return formulas.affirmative_score(data, config)
        if isinstance(data, ParentTransferData) and isinstance(config, ParentTransferConfig):
            return formulas.parent_transfer_score(data, config)
        raise ScoringValidationError(
            f"Applicant data {type(data).__name__} does not match config {type(config).__name__}"
        )

    def score_registration(self, registration, path) -> float:
        """Score an ORM registration against its ORM path."""
        score = self.score(registration.path_data, path.path_type, path.scoring_config)
        logger.debug(f"Registration {registration.id} scored {score:.2f} on path {path.id}")
        return score
