#!/usr/bin/env python3
"""
Tests for parsing path_data and scoring_config bags into typed variants.
"""

import unittest

from core.enums import PathType
from core.exceptions import ScoringValidationError, ValidationException
from core.scorer.models import (
    ProximityData, AchievementData, AffirmativeData, ParentTransferData,
    ProximityConfig, AchievementConfig, AffirmativeConfig, ParentTransferConfig,
    parse_applicant_data, parse_scoring_config,
)


class TestParseApplicantData(unittest.TestCase):

    def test_proximity_requires_distance(self):
        with self.assertRaises(ScoringValidationError) as ctx:
            parse_applicant_data(PathType.PROXIMITY, {})
        self.assertEqual(ctx.exception.field, 'distance_km')

    def test_proximity_rejects_non_numeric_distance(self):
        for bad in ("2.5", True, None, float('nan')):
            with self.subTest(value=bad):
                with self.assertRaises(ScoringValidationError):
                    parse_applicant_data(PathType.PROXIMITY, {'distance_km': bad})

    def test_proximity_accepts_int(self):
        self.assertEqual(parse_applicant_data(PathType.PROXIMITY, {'distance_km': 3}), ProximityData(3.0))

    def test_achievement_requires_rapor(self):
        with self.assertRaises(ScoringValidationError) as ctx:
            parse_applicant_data(PathType.ACHIEVEMENT, {'achievement_points': 10})
        self.assertEqual(ctx.exception.field, 'rapor_average')

    def test_achievement_rapor_out_of_range(self):
        for bad in (-1, 100.5):
            with self.subTest(value=bad):
                with self.assertRaises(ScoringValidationError):
                    parse_applicant_data(PathType.ACHIEVEMENT, {'rapor_average': bad})

    def test_achievement_points_optional(self):
        data = parse_applicant_data(PathType.ACHIEVEMENT, {'rapor_average': 80})
        self.assertEqual(data, AchievementData(rapor_average=80.0, achievement_points=0.0))

    def test_affirmative_flags_must_be_true(self):
        data = parse_applicant_data(
            PathType.AFFIRMATIVE,
            {'has_kip': True, 'is_poor_family': "yes", 'has_disability': 1}
        )
        self.assertEqual(data, AffirmativeData(has_kip=True, is_poor_family=False, has_disability=False))

    def test_affirmative_without_data(self):
        self.assertEqual(parse_applicant_data(PathType.AFFIRMATIVE, None), AffirmativeData())

    def test_parent_transfer(self):
        data = parse_applicant_data(PathType.PARENT_TRANSFER, {'has_transfer_letter': True})
        self.assertEqual(data, ParentTransferData(has_transfer_letter=True, has_parent_assignment=False))

    def test_validation_error_is_a_validation_exception(self):
        with self.assertRaises(ValidationException):
            parse_applicant_data(PathType.PROXIMITY, {'distance_km': 'far'})


class TestParseScoringConfig(unittest.TestCase):

    def test_defaults_when_empty(self):
        self.assertEqual(parse_scoring_config(PathType.PROXIMITY, None), ProximityConfig(distance_weight=2.0))
        self.assertEqual(parse_scoring_config(PathType.ACHIEVEMENT, {}), AchievementConfig(0.7, 0.3))
        self.assertEqual(parse_scoring_config(PathType.AFFIRMATIVE, {}), AffirmativeConfig())
        self.assertEqual(parse_scoring_config(PathType.PARENT_TRANSFER, {}), ParentTransferConfig())

    def test_overrides_known_keys(self):
        config = parse_scoring_config(PathType.ACHIEVEMENT, {'rapor_weight': 0.5, 'achievement_weight': 0.5})
        self.assertEqual(config, AchievementConfig(rapor_weight=0.5, achievement_weight=0.5))

    def test_unknown_keys_ignored(self):
        config = parse_scoring_config(PathType.PROXIMITY, {'distance_weight': 3, 'bogus': 1})
        self.assertEqual(config, ProximityConfig(distance_weight=3.0))

    def test_invalid_value_falls_back_to_default(self):
        with self.assertLogs('core.scorer.models', level='WARNING'):
            config = parse_scoring_config(PathType.PROXIMITY, {'distance_weight': 'heavy'})
        self.assertEqual(config, ProximityConfig(distance_weight=2.0))


class TestPathTypeParse(unittest.TestCase):

    def test_wire_values(self):
        self.assertIs(PathType.parse('zonasi'), PathType.PROXIMITY)
        self.assertIs(PathType.parse(' Prestasi '), PathType.ACHIEVEMENT)
        self.assertIs(PathType.parse('afirmasi'), PathType.AFFIRMATIVE)
        self.assertIs(PathType.parse('perpindahan_tugas'), PathType.PARENT_TRANSFER)

    def test_unknown_path_type(self):
        with self.assertRaises(ValidationException):
            PathType.parse('lottery')


if __name__ == '__main__':
    unittest.main()
