#!/usr/bin/env python3
"""
Tests for PathScorer dispatch.
"""

import unittest
from unittest.mock import Mock

from core.enums import PathType
from core.exceptions import ScoringValidationError
from core.scorer import PathScorer, ProximityData, AchievementConfig


class TestPathScorer(unittest.TestCase):

    def setUp(self):
        self.scorer = PathScorer()

    def test_proximity_example(self):
        self.assertEqual(self.scorer.score({'distance_km': 2.5}, 'zonasi', {'distance_weight': 2.0}), 95.0)

    def test_achievement_example(self):
        score = self.scorer.score({'rapor_average': 85, 'achievement_points': 10}, PathType.ACHIEVEMENT)
        self.assertEqual(score, 62.5)

    def test_affirmative_with_config(self):
        score = self.scorer.score({'has_kip': True}, 'afirmasi', {'kip_bonus': 30})
        self.assertEqual(score, 80.0)

    def test_parent_transfer(self):
        score = self.scorer.score({'has_parent_assignment': True}, 'perpindahan_tugas')
        self.assertEqual(score, 80.0)

    def test_unknown_path_type(self):
        with self.assertRaises(ScoringValidationError) as ctx:
            self.scorer.score({}, 'lottery')
        self.assertEqual(ctx.exception.field, 'path_type')

    def test_missing_required_field(self):
        with self.assertRaises(ScoringValidationError) as ctx:
            self.scorer.score({}, 'zonasi')
        self.assertEqual(ctx.exception.field, 'distance_km')

    def test_deterministic(self):
        scores = {self.scorer.score({'distance_km': 1.234}, 'zonasi') for _ in range(10)}
        self.assertEqual(len(scores), 1)

    def test_mismatched_variants(self):
        with self.assertRaises(ScoringValidationError):
            self.scorer.score_typed(ProximityData(1.0), AchievementConfig())

    def test_score_registration_reads_orm_attributes(self):
        registration = Mock(id=7, path_data={'distance_km': 1.0})
        path = Mock(id=3, path_type='zonasi', scoring_config={'distance_weight': 2.0})
        self.assertEqual(self.scorer.score_registration(registration, path), 98.0)


if __name__ == '__main__':
    unittest.main()
