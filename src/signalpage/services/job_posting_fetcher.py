"""
Job posting fetcher - downloads a posting page and extracts the job description text
"""

import re
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 15.0
MIN_TEXT_LENGTH = 100
UNMARKED_MAX_LENGTH = 8000
MAX_DESCRIPTION_LENGTH = 10000

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SignalPage/1.0; +https://signalpage.ai)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

BLOCK_TAGS = ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr", "br", "hr"]

START_MARKERS = [
    re.compile(r"job\s*description", re.I),
    re.compile(r"about\s*the\s*role", re.I),
    re.compile(r"about\s*this\s*role", re.I),
    re.compile(r"role\s*overview", re.I),
    re.compile(r"position\s*overview", re.I),
    re.compile(r"what\s*you['’]?ll\s*do", re.I),
    re.compile(r"responsibilities", re.I),
    re.compile(r"the\s*opportunity", re.I),
]

END_MARKERS = [
    re.compile(r"apply\s*now", re.I),
    re.compile(r"submit\s*application", re.I),
    re.compile(r"how\s*to\s*apply", re.I),
    re.compile(r"equal\s*opportunity", re.I),
    re.compile(r"we\s*are\s*an\s*equal", re.I),
    re.compile(r"about\s*the\s*company", re.I),
    re.compile(r"about\s*us$", re.I),
    re.compile(r"similar\s*jobs", re.I),
    re.compile(r"related\s*jobs", re.I),
    re.compile(r"share\s*this\s*job", re.I),
]

MANUAL_COPY_HINT = "Please copy and paste the job description manually."


class JobPostingFetchError(Exception):
    def __init__(self, message: str, status_code: int = 422):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_posting_url(url: Optional[str]) -> str:
    if not url:
        raise JobPostingFetchError("URL is required", status_code=400)
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise JobPostingFetchError("Invalid URL format", status_code=400)
    return url


def extract_text_from_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    for tag in soup.find_all(BLOCK_TAGS):
        tag.append("\n")

    text = soup.get_text(separator=" ")
    text = text.replace("\xa0", " ")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n", "\n\n", text)
    text = re.sub(r"^[ \t]+|[ \t]+$", "", text, flags=re.M)
    return text.strip()


def extract_job_description(text: str) -> str:
    """Cut the description window out of a full page of text using section markers"""
    start_index = 0
    end_index = len(text)

    # Only the first marker that appears is considered
    for marker in START_MARKERS:
        match = marker.search(text)
        if match:
            if match.start() > 50:
                start_index = match.start()
            break

    remainder = text[start_index:]
    for marker in END_MARKERS:
        match = marker.search(remainder)
        if match:
            possible_end = start_index + match.start()
            if start_index + 200 < possible_end < end_index:
                end_index = possible_end

    extracted = text[start_index:end_index].strip()

    if start_index == 0 and len(extracted) > UNMARKED_MAX_LENGTH:
        extracted = extracted[:UNMARKED_MAX_LENGTH] + "..."

    if len(extracted) > MAX_DESCRIPTION_LENGTH:
        extracted = extracted[:MAX_DESCRIPTION_LENGTH] + "..."

    return extracted


async def fetch_job_posting(url: Optional[str]) -> str:
    """Fetch a posting URL and return the extracted description, raising JobPostingFetchError"""
    url = validate_posting_url(url)

    try:
        async with httpx.AsyncClient(
            timeout=FETCH_TIMEOUT_SECONDS,
            headers=REQUEST_HEADERS,
            follow_redirects=True
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException:
        logger.warning(f"Timed out fetching job posting {url}")
        raise JobPostingFetchError(
            f"Request timed out. The page took too long to load. {MANUAL_COPY_HINT}"
        )
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch job posting {url}: {e}")
        raise JobPostingFetchError(
            f"Could not access the job posting. The site may be blocking automated access. {MANUAL_COPY_HINT}"
        )

    if not response.is_success:
        raise JobPostingFetchError(
            f"Could not access the page (HTTP {response.status_code}). {MANUAL_COPY_HINT}"
        )

    text = extract_text_from_html(response.text)
    if len(text) < MIN_TEXT_LENGTH:
        raise JobPostingFetchError(
            "Could not extract job description from the page. The page may require login or use "
            f"JavaScript to load content. {MANUAL_COPY_HINT}"
        )

    description = extract_job_description(text)
    logger.info(f"Extracted {len(description)} chars of job description from {url}")
    return description
