"""LLM-based extraction of a PriorityProfile from a job description."""

import json
import logging

from pydantic import ValidationError

from src.core.errors import MalformedResponse
from src.pipeline.response_parser import find_json_span
from src.pipeline.scoring_client import ScoringClient
from src.profile.schema import PriorityProfile

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are an expert HR recruiter analyzing job descriptions. "
    "Always respond with valid JSON only."
)

_SCHEMA = """{
  "industry": "Primary industry (e.g., 'mRNA', 'biotech', 'software', 'finance')",
  "required_skills": ["skill1", "skill2", "skill3"],
  "preferred_skills": ["skill1", "skill2"],
  "education_priority": "high/medium/low",
  "experience_priority": "high/medium/low",
  "technical_priority": "high/medium/low",
  "leadership_priority": "high/medium/low",
  "publications_priority": "high/medium/low",
  "certifications_priority": "high/medium/low",
  "work_location": "onsite/remote/hybrid",
  "team_collaboration": "required/preferred/not_mentioned",
  "fast_paced": "required/preferred/not_mentioned",
  "cross_functional": "required/preferred/not_mentioned",
  "specific_requirements": ["requirement1", "requirement2"],
  "red_flags": ["flag1", "flag2"],
  "bonus_factors": ["factor1", "factor2"]
}"""


def build_extraction_prompt(job_title: str, job_description: str) -> str:
    return (
        "Analyze the following job description and extract key priorities, "
        "requirements, and scoring factors. Focus on identifying what the "
        "employer values most.\n\n"
        f"Job Title: {job_title or 'Not specified'}\n"
        f"Job Description: {job_description}\n\n"
        "Please provide your analysis in the following JSON format only "
        f"(no additional text):\n\n{_SCHEMA}\n\n"
        "Focus on:\n"
        "1. Industry-specific requirements\n"
        "2. Technical vs soft skills emphasis\n"
        "3. Education level preferences\n"
        "4. Experience requirements\n"
        "5. Work environment preferences\n"
        "6. Any specific technologies or methodologies mentioned\n"
        "7. Leadership or management requirements\n"
        "8. Publication or research requirements\n\n"
        "Respond with ONLY the JSON object, no additional text or formatting."
    )


def parse_priorities(raw_text: str) -> PriorityProfile:
    """Parse an extraction reply into a PriorityProfile.

    Raises:
        MalformedResponse: No JSON object, invalid JSON, or a non-object value.
    """
    span = find_json_span(raw_text or "")
    if span is None:
        msg = "No JSON object found in priority extraction response"
        raise MalformedResponse(msg)

    try:
        data = json.loads(span)
        return PriorityProfile.model_validate(data)
    except ValidationError as e:
        msg = f"Priority extraction response has an unexpected shape: {e}"
        raise MalformedResponse(msg) from e
    except (ValueError, RecursionError) as e:
        msg = f"Failed to parse priority extraction response as JSON: {e}"
        raise MalformedResponse(msg) from e


async def extract_priorities(
    client: ScoringClient,
    job_title: str,
    job_description: str,
) -> PriorityProfile:
    """Ask the remote capability for the job's priority profile.

    Raises:
        MalformedResponse: The reply was not a usable JSON object.
        RemoteError: The call itself failed.
    """
    prompt = build_extraction_prompt(job_title, job_description)
    logger.info("Extracting job priorities for '%s'", job_title or "untitled job")
    raw = await client.complete(prompt, system=_SYSTEM_PROMPT)
    priorities = parse_priorities(raw)
    logger.info(
        "Priorities: industry=%r, %d required skills, location=%r",
        priorities.industry,
        len(priorities.required_skills),
        priorities.work_location,
    )
    return priorities
