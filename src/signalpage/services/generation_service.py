"""
Content generation service - turns resumes and job descriptions into signal page sections
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from signalpage.models.email import GeneratedEmail
from signalpage.models.job import ParsedJobRequirements
from signalpage.models.resume import ParsedResume
from signalpage.models.signal_page import CaseStudy, FitSection, HeroSection, HighlightSection, Plan306090
from signalpage.services.llm.client import get_llm_client
from signalpage.services.llm.prompts import (
    EMAIL_SYSTEM_PROMPT,
    GENERATE_30_60_90_PROMPT,
    GENERATE_AI_COMMENTARY_PROMPT,
    GENERATE_CASE_STUDIES_PROMPT,
    GENERATE_FIT_SECTION_PROMPT,
    GENERATE_HERO_PROMPT,
    GENERATE_HIGHLIGHTS_PROMPT,
    JSON_RETRY_NUDGE,
    PARSE_JOB_PROMPT,
    PARSE_RESUME_PROMPT,
    SYSTEM_PROMPT,
    GenerationContext,
    build_generation_context,
    create_generation_prompt,
)
from signalpage.services.llm.types import GenerationError, LLMConfig, LLMMessage
from signalpage.utils.helpers import parse_json_response

logger = logging.getLogger(__name__)

MAX_JSON_RETRIES = 2
FULL_PAGE_SECTIONS = 6

EMAIL_LLM_CONFIG = LLMConfig(provider="openai", model="gpt-4o-mini", temperature=0.7, max_tokens=1500)

ProgressCallback = Callable[[str, float], Any]


async def generate_with_retry(
    messages: List[LLMMessage],
    config: Optional[LLMConfig] = None,
    max_retries: int = MAX_JSON_RETRIES
) -> Any:
    """
    Complete and parse JSON, retrying after provider errors or unparseable answers.

    Each retry appends an assistant nudge asking for valid JSON. Once every
    attempt has failed the last error is wrapped in GenerationError.
    """
    client = get_llm_client()
    conversation = list(messages)
    last_error: Optional[Exception] = None

    for attempt in range(max_retries + 1):
        try:
            result = await client.complete(conversation, config)
            return parse_json_response(result.content)
        except json.JSONDecodeError as e:
            last_error = e
            logger.warning(f"LLM returned invalid JSON (attempt {attempt + 1}/{max_retries + 1}): {e}")
        except Exception as e:
            last_error = e
            logger.warning(f"LLM call failed (attempt {attempt + 1}/{max_retries + 1}): {e}")
        if attempt < max_retries:
            conversation.append(LLMMessage(role="assistant", content=JSON_RETRY_NUDGE))

    raise GenerationError(f"Failed to generate valid JSON after {max_retries + 1} attempts: {last_error}") from last_error


def _section_messages(template: str, context: GenerationContext) -> List[LLMMessage]:
    return [
        LLMMessage(role="system", content=SYSTEM_PROMPT),
        LLMMessage(role="user", content=create_generation_prompt(template, context)),
    ]


async def parse_job_description(job_description: str, config: Optional[LLMConfig] = None) -> ParsedJobRequirements:
    messages = [
        LLMMessage(role="system", content=SYSTEM_PROMPT),
        LLMMessage(role="user", content=PARSE_JOB_PROMPT + job_description),
    ]
    data = await generate_with_retry(messages, config)
    return ParsedJobRequirements.model_validate(data)


async def parse_resume(resume_text: str, config: Optional[LLMConfig] = None) -> ParsedResume:
    messages = [
        LLMMessage(role="system", content=SYSTEM_PROMPT),
        LLMMessage(role="user", content=PARSE_RESUME_PROMPT + resume_text),
    ]
    data = await generate_with_retry(messages, config)
    return ParsedResume.model_validate(data)


async def generate_hero_section(context: GenerationContext, config: Optional[LLMConfig] = None) -> HeroSection:
    data = await generate_with_retry(_section_messages(GENERATE_HERO_PROMPT, context), config)
    return HeroSection.model_validate(data)


async def generate_fit_section(context: GenerationContext, config: Optional[LLMConfig] = None) -> FitSection:
    data = await generate_with_retry(_section_messages(GENERATE_FIT_SECTION_PROMPT, context), config)
    return FitSection.model_validate(data)


async def generate_highlights(context: GenerationContext, config: Optional[LLMConfig] = None) -> List[HighlightSection]:
    data = await generate_with_retry(_section_messages(GENERATE_HIGHLIGHTS_PROMPT, context), config)
    if not isinstance(data, list):
        raise GenerationError("Highlights response was not a JSON array")
    return [HighlightSection.model_validate(item) for item in data]


async def generate_30_60_90_plan(context: GenerationContext, config: Optional[LLMConfig] = None) -> Plan306090:
    data = await generate_with_retry(_section_messages(GENERATE_30_60_90_PROMPT, context), config)
    return Plan306090.model_validate(data)


async def generate_case_studies(context: GenerationContext, config: Optional[LLMConfig] = None) -> List[CaseStudy]:
    data = await generate_with_retry(_section_messages(GENERATE_CASE_STUDIES_PROMPT, context), config)
    if not isinstance(data, list):
        raise GenerationError("Case studies response was not a JSON array")
    return [CaseStudy.model_validate(item) for item in data]


async def generate_ai_commentary(context: GenerationContext, config: Optional[LLMConfig] = None) -> str:
    """Commentary is prose, so it skips JSON parsing"""
    result = await get_llm_client().complete(_section_messages(GENERATE_AI_COMMENTARY_PROMPT, context), config)
    return result.content.strip()


async def _report(on_progress: Optional[ProgressCallback], section: str, completed: int):
    if on_progress is None:
        return
    outcome = on_progress(section, completed / FULL_PAGE_SECTIONS)
    if asyncio.iscoroutine(outcome):
        await outcome


async def generate_full_page(
    context: GenerationContext,
    config: Optional[LLMConfig] = None,
    on_progress: Optional[ProgressCallback] = None
) -> Dict[str, Any]:
    """
    Generate every page section in two concurrent phases.

    Phase one builds hero, fit and highlights; phase two builds the plan,
    case studies and commentary. on_progress(section, fraction) is called
    as each section finishes (sync or async callables are accepted).
    """
    logger.info(f"Generating full page for {context.job.get('company_name')} - {context.job.get('role_title')}")
    completed = 0

    async def tracked(section: str, pending: Awaitable[Any]) -> Any:
        nonlocal completed
        result = await pending
        completed += 1
        await _report(on_progress, section, completed)
        return result

    hero, fit_section, highlights = await asyncio.gather(
        tracked("hero", generate_hero_section(context, config)),
        tracked("fit_section", generate_fit_section(context, config)),
        tracked("highlights", generate_highlights(context, config)),
    )

    plan, case_studies, commentary = await asyncio.gather(
        tracked("plan_30_60_90", generate_30_60_90_plan(context, config)),
        tracked("case_studies", generate_case_studies(context, config)),
        tracked("ai_commentary", generate_ai_commentary(context, config)),
    )

    return {
        "hero": hero.model_dump(),
        "fit_section": fit_section.model_dump(),
        "highlights": [h.model_dump() for h in highlights],
        "plan_30_60_90": plan.model_dump(),
        "case_studies": [c.model_dump() for c in case_studies],
        "ai_commentary": commentary,
    }


async def generate_application_email(prompt: str, context: GenerationContext) -> GeneratedEmail:
    messages = [
        LLMMessage(role="system", content=EMAIL_SYSTEM_PROMPT),
        LLMMessage(role="user", content=f"{prompt}\n\n{build_generation_context(context)}"),
    ]
    data = await generate_with_retry(messages, EMAIL_LLM_CONFIG)
    try:
        return GeneratedEmail.model_validate(data)
    except ValueError as e:
        raise GenerationError(f"Email response missing subject or body: {e}")
