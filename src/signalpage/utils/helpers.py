"""
Utility functions and helpers
"""

import re
import json
import time
import hashlib
from typing import Any, Optional

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

def generate_slug(company_name: str, role_title: str) -> str:
    """URL slug for a page: 'Acme Inc' + 'Senior Engineer' -> 'acme-inc-senior-engineer'"""
    slug = f"{company_name}-{role_title}".lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:60]

def sanitize_username(value: str) -> str:
    return re.sub(r"[^a-z0-9_-]", "", value.lower())[:30]

def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))

def unique_slug(slug: str, now_ms: Optional[int] = None) -> str:
    """Disambiguate a taken slug with a base36 millisecond timestamp suffix"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{slug}-{to_base36(now_ms)}"

def extract_json(content: str) -> str:
    """Strip a ```json fenced block from an LLM response if present"""
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
    if match:
        return match.group(1).strip()
    return content.strip()

def parse_json_response(content: str) -> Any:
    return json.loads(extract_json(content))

def normalize_text(text: str) -> str:
    """Normalize line endings and collapse runs of blank lines"""
    text = text.replace("\r\n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()

def hash_value(value: Optional[str]) -> Optional[str]:
    """sha256 hex digest, used so raw IPs never reach the database"""
    if not value:
        return None
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
