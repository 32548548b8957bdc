"""
Resume-to-job match scoring.

score = 40% skills + 35% experience + 25% requirements, each component 0-100.
"""

import re
from typing import List, Tuple, Iterable

from signalpage.models.job import ParsedJobRequirements
from signalpage.models.resume import ParsedResume
from signalpage.models.signal_page import MatchBreakdown

SKILLS_WEIGHT = 0.40
EXPERIENCE_WEIGHT = 0.35
REQUIREMENTS_WEIGHT = 0.25

# Score used when the job lists no responsibilities / business problems
NEUTRAL_COMPONENT_SCORE = 75.0

# Canonical skill name -> common variations
SKILL_ALIASES = {
    "javascript": ["js", "ecmascript"],
    "typescript": ["ts"],
    "python": ["py"],
    "react": ["reactjs", "react.js"],
    "node": ["nodejs", "node.js"],
    "postgres": ["postgresql", "psql"],
    "mongodb": ["mongo"],
    "kubernetes": ["k8s"],
    "aws": ["amazon web services"],
    "gcp": ["google cloud", "google cloud platform"],
    "azure": ["microsoft azure"],
    "ml": ["machine learning"],
    "ai": ["artificial intelligence"],
    "ci/cd": ["cicd", "continuous integration", "continuous deployment"],
    "docker": ["containers", "containerization"],
}

SCORE_LABELS = [
    (80, "Excellent Match"),
    (60, "Strong Match"),
    (40, "Moderate Match"),
]


def normalize_skill(skill: str) -> str:
    return skill.lower().strip()


def skills_similar(skill_a: str, skill_b: str) -> bool:
    """Two skills are similar when both fall in the same alias group (exactly or by substring)"""
    for canonical, variations in SKILL_ALIASES.items():
        group = [canonical] + variations
        if skill_a in group and skill_b in group:
            return True
        if any(v in skill_a for v in group) and any(v in skill_b for v in group):
            return True
    return False


def _skill_matches(job_skill: str, resume_skills: Iterable[str]) -> bool:
    return any(
        job_skill in resume_skill or resume_skill in job_skill or skills_similar(resume_skill, job_skill)
        for resume_skill in resume_skills
    )


def _resume_skills(resume: ParsedResume) -> set:
    skills = {normalize_skill(s) for s in resume.skills}
    for experience in resume.experiences:
        skills.update(normalize_skill(t) for t in experience.technologies or [])
    for project in resume.projects or []:
        skills.update(normalize_skill(t) for t in project.technologies or [])
    skills.discard("")
    return skills


def _keyword_coverage(statements: List[str], corpus: str) -> float:
    """Percent of statements with at least one word longer than 4 chars present in corpus"""
    if not statements:
        return NEUTRAL_COMPONENT_SCORE

    matched = 0
    for statement in statements:
        keywords = [w for w in re.split(r"\s+", statement.lower()) if len(w) > 4]
        if any(keyword in corpus for keyword in keywords):
            matched += 1
    return matched / len(statements) * 100


def experience_match(resume: ParsedResume, requirements: ParsedJobRequirements) -> float:
    corpus = " ".join(
        f"{exp.description} {' '.join(exp.achievements)}" for exp in resume.experiences
    ).lower()
    return _keyword_coverage(requirements.responsibilities, corpus)


def requirements_match(resume: ParsedResume, requirements: ParsedJobRequirements) -> float:
    achievements = [a for exp in resume.experiences for a in exp.achievements]
    highlights = [h for project in resume.projects or [] for h in project.highlights]
    corpus = " ".join(achievements + highlights).lower()
    return _keyword_coverage(requirements.business_problems, corpus)


def _round_half_up(value: float) -> int:
    """62.5 -> 63; round() would give 62"""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def calculate_match_score(
    resume: ParsedResume,
    requirements: ParsedJobRequirements
) -> Tuple[int, MatchBreakdown]:
    """
    Score a resume against parsed job requirements

    Returns:
        Tuple of (score 0-100, MatchBreakdown)
    """
    resume_skills = _resume_skills(resume)

    job_skills: List[str] = []
    for skill in requirements.required_skills + requirements.preferred_skills:
        normalized = normalize_skill(skill)
        if normalized and normalized not in job_skills:
            job_skills.append(normalized)

    matched = [s for s in job_skills if _skill_matches(s, resume_skills)]
    missing = [s for s in job_skills if s not in matched]

    skills_percent = len(matched) / len(job_skills) * 100 if job_skills else 100.0
    experience_percent = experience_match(resume, requirements)
    requirements_percent = requirements_match(resume, requirements)

    score = _round_half_up(
        skills_percent * SKILLS_WEIGHT
        + experience_percent * EXPERIENCE_WEIGHT
        + requirements_percent * REQUIREMENTS_WEIGHT
    )

    breakdown = MatchBreakdown(
        skills_match=_round_half_up(skills_percent),
        experience_match=_round_half_up(experience_percent),
        requirements_match=_round_half_up(requirements_percent),
        matched_skills=matched,
        missing_skills=missing,
        total_required_skills=len(job_skills),
        total_matched_skills=len(matched),
    )
    return min(100, max(0, score)), breakdown


def get_score_label(score: int) -> str:
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return "Needs Review"
