"""
Prompt templates and context builders for page and email generation
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from signalpage.models.resume import ParsedResume

SYSTEM_PROMPT = """You are an expert career coach and professional resume writer. You help job seekers create compelling, role-specific content that demonstrates clear alignment between their experience and target opportunities.

Your writing style is:
- Professional but not stuffy
- Specific and metrics-driven when possible
- Confident without being arrogant
- Focused on impact and outcomes, not just responsibilities

Always output valid JSON when asked for structured data."""

EMAIL_SYSTEM_PROMPT = """You are an expert career coach helping job seekers write effective professional emails.
Write in first person as the candidate. Be professional but personable.
Always output valid JSON as specified in the prompt."""

# Sent as an assistant turn when a structured response failed to parse
JSON_RETRY_NUDGE = "I apologize, let me try again with valid JSON:"


@dataclass
class CompanyResearch:
    about: Optional[str] = None
    products: Optional[List[str]] = None
    recent_news: Optional[List[str]] = None
    culture_keywords: Optional[List[str]] = None
    tech_stack: Optional[List[str]] = None


@dataclass
class GenerationContext:
    """Everything the generators know about the candidate and the target job"""
    resume: ParsedResume
    job: Dict[str, Any]
    user: Dict[str, Any]
    company_research: Optional[CompanyResearch] = None
    recruiter_name: Optional[str] = None
    hiring_manager_name: Optional[str] = None


def build_resume_context(resume: ParsedResume) -> str:
    experiences = []
    for exp in resume.experiences:
        block = (
            f"**{exp.title} at {exp.company}** ({exp.start_date} - {exp.end_date or 'Present'})\n"
            f"{exp.description}\n"
            f"Achievements: {'; '.join(exp.achievements)}"
        )
        if exp.technologies:
            block += f"\nTechnologies: {', '.join(exp.technologies)}"
        experiences.append(block)

    sections = [
        "## Candidate Background",
        f"### Summary\n{resume.summary or 'Not provided'}",
        "### Work Experience\n" + "\n\n".join(experiences),
        f"### Skills\n{', '.join(resume.skills)}",
    ]

    if resume.projects:
        projects = "\n\n".join(
            f"**{p.name}**: {p.description}\n"
            f"Technologies: {', '.join(p.technologies)}\n"
            f"Highlights: {'; '.join(p.highlights)}"
            for p in resume.projects
        )
        sections.append(f"### Notable Projects\n{projects}")

    return "\n\n".join(sections)


def build_job_context(job: Dict[str, Any]) -> str:
    sections = [
        "## Target Role",
        f"**Position**: {job.get('role_title')} at {job.get('company_name')}\n"
        f"**Seniority Level**: {job.get('seniority_level')}",
        f"### Job Description\n{job.get('job_description', '')}",
    ]

    requirements = job.get("parsed_requirements")
    if requirements:
        sections.append(
            "### Parsed Requirements\n"
            f"**Key Responsibilities**: {'; '.join(requirements.get('responsibilities', []))}\n"
            f"**Required Skills**: {', '.join(requirements.get('required_skills', []))}\n"
            f"**Preferred Skills**: {', '.join(requirements.get('preferred_skills', []))}\n"
            f"**Business Problems**: {'; '.join(requirements.get('business_problems', []))}"
        )

    return "\n\n".join(sections)


def build_company_context(research: CompanyResearch) -> str:
    return (
        "## Company Research\n"
        f"**About**: {research.about or 'Not available'}\n"
        f"**Products**: {', '.join(research.products or []) or 'Not available'}\n"
        f"**Recent News**: {'; '.join(research.recent_news or []) or 'Not available'}\n"
        f"**Tech Stack**: {', '.join(research.tech_stack or []) or 'Not available'}"
    )


def build_generation_context(context: GenerationContext) -> str:
    parts = [build_resume_context(context.resume), build_job_context(context.job)]

    if context.company_research:
        parts.append(build_company_context(context.company_research))

    contacts = []
    if context.recruiter_name:
        contacts.append(f"**Recruiter**: {context.recruiter_name}")
    if context.hiring_manager_name:
        contacts.append(f"**Hiring Manager**: {context.hiring_manager_name}")
    if contacts:
        parts.append("## Contacts\n" + "\n".join(contacts))

    candidate = context.user or {}
    if candidate.get("full_name"):
        parts.append(
            "## Candidate\n"
            f"**Name**: {candidate.get('full_name')}\n"
            f"**Headline**: {candidate.get('headline') or 'Not provided'}"
        )

    return "\n\n".join(parts)


PARSE_JOB_PROMPT = """Analyze the following job description and extract structured information.

Return a JSON object with this exact structure:
{
  "responsibilities": ["list of 5-7 key responsibilities"],
  "required_skills": ["list of required technical skills and tools"],
  "preferred_skills": ["list of nice-to-have skills"],
  "business_problems": ["list of 2-4 business challenges this role addresses"],
  "role_context": "1-2 sentences about what success looks like in this role"
}

Job Description:
"""

PARSE_RESUME_PROMPT = """Parse the following resume text into structured data.

Return a JSON object with this exact structure:
{
  "summary": "professional summary or null",
  "experiences": [
    {
      "company": "company name",
      "title": "job title",
      "location": "location or null",
      "start_date": "YYYY-MM or approximate",
      "end_date": "YYYY-MM or null if current",
      "is_current": true/false,
      "description": "role description",
      "achievements": ["quantified achievements"],
      "technologies": ["technologies used"]
    }
  ],
  "education": [
    {
      "institution": "school name",
      "degree": "degree type",
      "field": "field of study or null",
      "end_date": "graduation year or null"
    }
  ],
  "skills": ["list of all skills mentioned"],
  "projects": [
    {
      "name": "project name",
      "description": "what it does",
      "technologies": ["tech used"],
      "highlights": ["key outcomes"]
    }
  ]
}

Resume Text:
"""

GENERATE_HERO_PROMPT = """Generate a compelling hero section for a job application landing page.

Return a JSON object:
{
  "tagline": "A punchy 5-10 word tagline that captures the candidate's value proposition for this specific role",
  "value_promise": "1-2 sentences explaining the unique value this candidate brings to this company/role"
}

The tagline should be memorable and specific to the intersection of the candidate's strengths and the company's needs.
"""

GENERATE_FIT_SECTION_PROMPT = """Generate a "Why I'm a strong fit" section that explicitly maps the candidate's experience to the job requirements.

Return a JSON object:
{
  "intro": "Optional 1 sentence intro",
  "fit_bullets": [
    {
      "requirement": "A specific requirement from the job description",
      "evidence": "Concrete evidence from the candidate's background (with metrics if available)"
    }
  ]
}

Generate 4-6 fit bullets. Each should:
- Quote or paraphrase a real requirement from the JD
- Provide specific evidence with company names, metrics, and outcomes
- Be compelling but truthful based on the resume provided
"""

GENERATE_HIGHLIGHTS_PROMPT = """Select and format the 2-4 most relevant career highlights for this role.

Return a JSON array:
[
  {
    "company": "Company name",
    "role": "Job title",
    "domain": "Industry/domain if relevant",
    "problem": "The business problem or challenge faced",
    "solution": "What the candidate did (briefly)",
    "impact": "Quantified outcomes and results",
    "metrics": ["Specific metrics if available"],
    "relevance_note": "1 sentence explaining why this is relevant to the target role"
  }
]

Focus on highlights that:
1. Demonstrate skills mentioned in the JD
2. Show similar business problems to what this company faces
3. Have clear, quantified impact
"""

GENERATE_30_60_90_PROMPT = """Generate a thoughtful 30/60/90 day plan for this role.

Return a JSON object:
{
  "intro": "1-2 sentences setting context based on company research",
  "day_30": {
    "title": "First 30 Days: [Theme]",
    "objectives": ["3-4 learning/discovery objectives"],
    "deliverables": ["1-2 early deliverables if appropriate"]
  },
  "day_60": {
    "title": "Days 31-60: [Theme]",
    "objectives": ["3-4 execution objectives"],
    "deliverables": ["2-3 concrete deliverables"]
  },
  "day_90": {
    "title": "Days 61-90: [Theme]",
    "objectives": ["3-4 scale/impact objectives"],
    "deliverables": ["2-3 larger deliverables or initiatives"]
  }
}

The plan should:
- Reference specific technologies/tools from the JD
- Address business problems mentioned in the job description
- Be realistic for the seniority level
- Show the candidate understands the company's context
"""

GENERATE_CASE_STUDIES_PROMPT = """Select 2-3 projects from the candidate's background that would resonate most with this role.

Return a JSON array:
[
  {
    "title": "Project or initiative name",
    "relevance": "Why this matters for [Company Name]",
    "description": "2-3 sentences about what was built/achieved",
    "link": "URL if available from resume, or null"
  }
]

Prioritize:
1. Projects using technologies mentioned in the JD
2. Projects solving similar business problems
3. Projects with impressive outcomes
"""

GENERATE_AI_COMMENTARY_PROMPT = """Write a brief (2-3 paragraphs) AI coach commentary section.

This section explains the strategic alignment between the candidate and this opportunity. Include:
1. Why this is a strong match based on career trajectory
2. Specific ways the candidate's experience maps to company needs
3. Any relevant company context (recent news, initiatives) that makes this timely

Write in first person as if you're the candidate's advocate explaining the match to a recruiter.
Keep it conversational but professional.
"""


EMAIL_PROMPTS = {
    "cover_letter": """Write a compelling cover letter for this job application.

The cover letter should:
- Open with a strong hook that shows genuine interest in the company/role
- Highlight 2-3 most relevant achievements from the resume that match job requirements
- Demonstrate knowledge of the company and why the candidate is excited about this opportunity
- Be concise (3-4 paragraphs max)
- End with a clear call to action
- Sound professional but personable, not generic

Return a JSON object:
{
  "subject": "Application for [Role Title] - [Candidate Name]",
  "body": "The full cover letter text with proper paragraph breaks using \\n\\n"
}""",

    "thank_you": """Write a thank you email following an interview.

Context provided:
- Interview Round: {{round}}
- Interview Type: {{interviewType}}

The thank you email should:
- Thank the interviewer(s) for their time
- Reference specific topics discussed (infer from job description and interview type)
- Reinforce why the candidate is a strong fit
- Address any potential concerns based on the interview type
- Be concise (2-3 paragraphs)
- Include next steps or express enthusiasm for moving forward

For different interview types, adjust tone:
- Recruiter: Professional, enthusiastic about opportunity
- Hiring Manager: Focus on team fit and leadership alignment
- Technical: Reference technical discussions, problem-solving approach
- Panel: Acknowledge multiple perspectives, team collaboration
- Executive: Strategic thinking, company vision alignment
- HR/Culture: Values alignment, cultural fit

Return a JSON object:
{
  "subject": "Thank You - [Role Title] Interview (Round {{round}})",
  "body": "The full email text with proper paragraph breaks using \\n\\n"
}""",

    "follow_up": """Write a follow-up email for a candidate awaiting a decision.

Context provided:
- Interview Round completed: {{round}}
- Last interview type: {{interviewType}}

The follow-up email should:
- Be polite and not pushy
- Reaffirm interest in the role
- Briefly mention continued enthusiasm
- Ask for a timeline update if appropriate
- Be very concise (2 short paragraphs)

Return a JSON object:
{
  "subject": "Following Up - [Role Title] Application",
  "body": "The full email text with proper paragraph breaks using \\n\\n"
}""",

    "offer_discussion": """Write an email to discuss a job offer.

The email should:
- Express gratitude for the offer
- Show enthusiasm for the opportunity
- Set up a conversation to discuss details (don't negotiate in email)
- Be professional and gracious
- Be concise (2-3 paragraphs)

Return a JSON object:
{
  "subject": "Re: [Role Title] Offer - Discussion",
  "body": "The full email text with proper paragraph breaks using \\n\\n"
}""",
}

INTERVIEW_TYPE_LABELS = {
    "recruiter": "Recruiter Screen",
    "hiring_manager": "Hiring Manager",
    "technical": "Technical Interview",
    "panel": "Panel Interview",
    "executive": "Executive/Leadership",
    "hr_culture": "HR/Culture Fit",
    "other": "General Interview",
}


def build_email_prompt(
    email_type: str,
    interview_round: Optional[int] = None,
    interview_type: Optional[str] = None
) -> str:
    prompt = EMAIL_PROMPTS[email_type]
    if interview_round:
        prompt = prompt.replace("{{round}}", str(interview_round))
    if interview_type:
        prompt = prompt.replace("{{interviewType}}", INTERVIEW_TYPE_LABELS.get(interview_type, interview_type))
    return prompt


def create_generation_prompt(template: str, context: GenerationContext) -> str:
    return f"{template}\n\n{build_generation_context(context)}"
