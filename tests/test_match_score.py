"""
Match scoring tests: weighted skills, experience and requirements components
"""

import pytest

from signalpage.models.job import ParsedJobRequirements
from signalpage.models.resume import ParsedResume
from signalpage.services.match_score import (
    calculate_match_score, get_score_label, skills_similar, NEUTRAL_COMPONENT_SCORE
)


class TestCalculateMatchScore:
    """Scores for a realistic resume against parsed job requirements"""

    def test_weighted_score_and_breakdown(self, parsed_resume_data, parsed_requirements_data):
        resume = ParsedResume.model_validate(parsed_resume_data)
        requirements = ParsedJobRequirements.model_validate(parsed_requirements_data)

        score, breakdown = calculate_match_score(resume, requirements)

        # 75 * 0.40 + 50 * 0.35 + 100 * 0.25 = 72.5, rounded half up
        assert score == 73
        assert breakdown.skills_match == 75
        assert breakdown.experience_match == 50
        assert breakdown.requirements_match == 100
        assert breakdown.matched_skills == ["python", "postgres", "k8s"]
        assert breakdown.missing_skills == ["rust"]
        assert breakdown.total_required_skills == 4
        assert breakdown.total_matched_skills == 3

    def test_empty_requirements_use_neutral_components(self, parsed_resume_data):
        resume = ParsedResume.model_validate(parsed_resume_data)

        score, breakdown = calculate_match_score(resume, ParsedJobRequirements())

        assert breakdown.skills_match == 100
        assert breakdown.experience_match == NEUTRAL_COMPONENT_SCORE
        assert breakdown.requirements_match == NEUTRAL_COMPONENT_SCORE
        assert score == 85

    def test_duplicate_job_skills_counted_once(self):
        resume = ParsedResume(skills=["Python"])
        requirements = ParsedJobRequirements(required_skills=["Python", " python "], preferred_skills=["PYTHON"])

        _, breakdown = calculate_match_score(resume, requirements)

        assert breakdown.total_required_skills == 1
        assert breakdown.matched_skills == ["python"]

    def test_empty_resume_scores_within_bounds(self, parsed_requirements_data):
        score, breakdown = calculate_match_score(
            ParsedResume(), ParsedJobRequirements.model_validate(parsed_requirements_data)
        )

        assert 0 <= score <= 100
        assert breakdown.total_matched_skills == 0
        assert breakdown.experience_match == 0


class TestSkillAliases:

    @pytest.mark.parametrize("a,b", [
        ("javascript", "js"),
        ("kubernetes", "k8s"),
        ("postgresql", "postgres"),
        ("amazon web services", "aws"),
    ])
    def test_alias_groups_match(self, a, b):
        assert skills_similar(a, b)

    def test_unrelated_skills_do_not_match(self):
        assert not skills_similar("rust", "python")


class TestScoreLabel:

    @pytest.mark.parametrize("score,label", [
        (95, "Excellent Match"),
        (80, "Excellent Match"),
        (79, "Strong Match"),
        (60, "Strong Match"),
        (40, "Moderate Match"),
        (39, "Needs Review"),
        (0, "Needs Review"),
    ])
    def test_thresholds(self, score, label):
        assert get_score_label(score) == label
