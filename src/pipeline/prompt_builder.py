"""Evaluation prompt construction for CV scoring.

Pure functions: identical inputs produce byte-identical prompts. With a
PriorityProfile the scoring criteria, deductions and bonus factors are
derived from the profile and the WeightConfiguration; without one a fixed
default rubric is used.
"""

from src.core.config import WeightConfiguration
from src.profile.schema import PriorityProfile

PROMPT_VERSION = "2"

DEFAULT_WEIGHTS = WeightConfiguration()

# Industries that get the life-science bonus lines.
_LIFE_SCIENCE_INDUSTRIES = ("biotech", "mrna", "pharma", "life science", "biolog")

# (label, percent of the category weight). Points = weight * percent // 100.
_ROLE_TIERS = (
    ("Exact title match", 100),
    ("Very similar role", 70),
    ("Related role", 30),
)
_EXPERIENCE_TIERS = (
    ("5+ years in exact field", 100),
    ("3-4 years in exact field", 80),
    ("2-3 years in exact field", 60),
    ("1-2 years in exact field", 40),
    ("Less than 1 year", 20),
)
_SKILLS_TIERS = (
    ("All required skills present", 100),
    ("Most required skills present", 75),
    ("Some required skills present", 50),
    ("Few required skills present", 25),
)
_EDUCATION_TIERS = (
    ("PhD in relevant field", 100),
    ("MS in relevant field", 80),
    ("BS in relevant field", 60),
    ("Other degree", 30),
)
_ACHIEVEMENT_TIERS = (
    ("High impact publications", 100),
    ("Conference presentations", 70),
    ("Patents or innovations", 80),
    ("Leadership roles", 60),
)

_DEFAULT_DEDUCTIONS = (
    "Missing required certifications: -10 points",
    "Employment gaps > 6 months: -5 points",
    "Job hopping (multiple jobs < 1 year): -10 points",
    "No relevant industry experience: -15 points",
    "Poor formatting/spelling errors: -5 points",
)

_FLAG_BONUSES = (
    ("cross_functional", "Cross-functional experience", 5, 3),
    ("fast_paced", "Fast-paced environment experience", 3, 2),
    ("team_collaboration", "Team collaboration experience", 3, 2),
)

_RESPONSE_FORMAT = """{
  "name": "Candidate's full name",
  "role": "Most recent job title",
  "company": "Most recent company",
  "duration": "Time in current role (e.g., '2 years', '6 months')",
  "education": "Highest education level and field",
  "score": 65,
  "summary": "Brief summary of candidate's fit",
  "rationale": "Detailed explanation of scoring, including specific strengths and weaknesses",
  "strengths": ["strength1", "strength2"],
  "concerns": ["concern1", "concern2"],
  "recommendation": "Strongly Recommend/Recommend/Consider/Do Not Recommend"
}"""

_GUIDELINES = """STRICT SCORING GUIDELINES (0-100):
- 90-100: Perfect Match (exceptional fit)
- 85-89: Exceptional (very strong fit)
- 80-84: Strong (good fit)
- 70-79: Good (acceptable fit)
- 60-69: Fair (some concerns)
- Below 60: Poor (significant concerns)
Be very critical. Most candidates should score between 30-70. Only truly
exceptional candidates should score above 80. If in doubt, score lower."""

_FOCUS = """Focus on:
1. Exact role match and relevance
2. Required skills presence and proficiency
3. Industry experience alignment
4. Education level and field relevance
5. Achievements and impact
6. Cultural fit indicators
7. Any red flags or concerns"""


def points(weight: int, percent: int) -> int:
    """Floor of weight x percent/100, in integer arithmetic."""
    return weight * percent // 100


def build_prompt(
    job_title: str,
    job_description: str,
    candidate_text: str,
    priorities: PriorityProfile | None = None,
    weights: WeightConfiguration | None = None,
) -> str:
    """Assemble the evaluation prompt for one candidate.

    Args:
        job_title: Title of the position.
        job_description: Free-text job description.
        candidate_text: Extracted résumé text.
        priorities: Extracted priority profile. None selects the default rubric.
        weights: Category weights for the dynamic rubric. Ignored without
            priorities; None means the defaults (30/25/20/20/5).

    Returns:
        The full prompt text.
    """
    if priorities is not None:
        criteria = _criteria_section(
            "DYNAMIC SCORING CRITERIA (based on job requirements)",
            weights or DEFAULT_WEIGHTS,
            priorities,
        )
        deductions = _dynamic_deductions(priorities)
        bonuses = _dynamic_bonuses(priorities)
    else:
        criteria = _criteria_section("SCORING CRITERIA", DEFAULT_WEIGHTS, None)
        deductions = list(_DEFAULT_DEDUCTIONS)
        bonuses = []

    sections = [
        "You are a strict and experienced HR recruiter. Analyze the following CV "
        "against the job requirements and provide a comprehensive evaluation.",
        f"JOB TITLE: {job_title or 'Not specified'}\nJOB DESCRIPTION: {job_description}",
        f"CV TEXT:\n{candidate_text}",
        criteria,
        _bullet_section("DEDUCTIONS (apply these to the final score)", deductions),
    ]
    if bonuses:
        sections.append(_bullet_section("BONUS FACTORS", bonuses))
    sections.extend([
        _GUIDELINES,
        "Please provide your analysis in the following JSON format only "
        f"(no additional text):\n\n{_RESPONSE_FORMAT}",
        _FOCUS,
        "Respond with ONLY the JSON object, no additional text or formatting.",
    ])
    return "\n\n".join(sections)


def _criteria_section(
    heading: str,
    weights: WeightConfiguration,
    priorities: PriorityProfile | None,
) -> str:
    skills_notes: list[str] = []
    if priorities is not None:
        required = ", ".join(priorities.required_skills) or "None specified"
        skills_notes.append(f"Required skills to check: {required}")
        if priorities.specific_requirements:
            skills_notes.append(
                "Specific requirements to verify: " + "; ".join(priorities.specific_requirements)
            )

    categories = [
        _category(1, "ROLE MATCH", weights.role_match, _ROLE_TIERS, "Unrelated role"),
        _category(
            2, "EXPERIENCE RELEVANCE", weights.experience, _EXPERIENCE_TIERS,
            "No relevant experience",
        ),
        _category(
            3, "SKILLS MATCH", weights.skills, _SKILLS_TIERS, "No required skills",
            notes=skills_notes,
        ),
        _category(4, "EDUCATION", weights.education, _EDUCATION_TIERS, "No degree"),
        _category(
            5, "ACHIEVEMENTS & IMPACT", weights.achievements, _ACHIEVEMENT_TIERS,
            "No significant achievements",
        ),
    ]
    return f"{heading}:\n\n" + "\n\n".join(categories)


def _category(
    number: int,
    title: str,
    weight: int,
    tiers: tuple[tuple[str, int], ...],
    zero_label: str,
    *,
    notes: list[str] | None = None,
) -> str:
    lines = [f"{number}. {title} ({weight}% of score):"]
    lines.extend(f"   - {label}: +{points(weight, pct)} points" for label, pct in tiers)
    lines.append(f"   - {zero_label}: 0 points")
    for note in notes or []:
        lines.append(f"   {note}")
    return "\n".join(lines)


def _dynamic_deductions(priorities: PriorityProfile) -> list[str]:
    lines: list[str] = []
    if priorities.required_skills:
        lines.append("Missing required skills: -5 points per skill")
    if priorities.industry:
        lines.append(f"No relevant {priorities.industry} industry experience: -10 points")
    else:
        lines.append("No relevant industry experience: -10 points")
    if priorities.technical_priority == "high":
        lines.append("No technical skills: -15 points")
    if priorities.work_location == "onsite":
        lines.append("No indication of ability to work onsite: -5 points")
    elif priorities.work_location == "hybrid":
        lines.append("No indication of ability to work hybrid: -3 points")
    lines.extend(f"Red flag - {flag}: -5 points" for flag in priorities.red_flags)
    return lines


def _dynamic_bonuses(priorities: PriorityProfile) -> list[str]:
    lines: list[str] = []
    industry = priorities.industry.lower()
    if industry:
        lines.append(f"Direct {priorities.industry} experience: +10 points")
        if any(marker in industry for marker in _LIFE_SCIENCE_INDUSTRIES):
            lines.append("Industry experience (vs CRO): +5 points")
            lines.append("High impact journal publications: +8 points")
    if priorities.work_location == "remote":
        lines.append("Proven remote work experience: +3 points")
    for field, label, required_points, preferred_points in _FLAG_BONUSES:
        level = getattr(priorities, field)
        if level == "required":
            lines.append(f"{label}: +{required_points} points")
        elif level == "preferred":
            lines.append(f"{label}: +{preferred_points} points")
    if priorities.preferred_skills:
        skills = ", ".join(priorities.preferred_skills)
        lines.append(f"Preferred skills present ({skills}): +2 points per skill")
    lines.extend(f"{factor}: +3 points" for factor in priorities.bonus_factors)
    return lines


def _bullet_section(heading: str, lines: list[str]) -> str:
    return f"{heading}:\n" + "\n".join(f"- {line}" for line in lines)
