# framety/projects/sanitizers.py
"""
Input sanitization for project data.

Everything typed by staff (titles, briefings, client names, tags, links)
passes through these functions before being stored.
"""
import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

import bleach

from core.exceptions import ValidationError


# Allowed HTML tags for briefing/description rich text
ALLOWED_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'a', 'ul', 'ol', 'li',
    'h1', 'h2', 'h3', 'blockquote', 'code', 'pre'
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
}

TITLE_MAX_LENGTH = 255
CLIENT_MAX_LENGTH = 255
TAG_MAX_LENGTH = 50
MAX_TAGS = 30


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    text = str(text)
    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_html(html: Optional[str], max_length: Optional[int] = None) -> str:
    """Sanitize HTML content, removing dangerous elements."""
    if html is None:
        return ""

    clean = bleach.clean(
        str(html).strip(),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True
    )

    if max_length and len(clean) > max_length:
        clean = clean[:max_length]

    return clean


def sanitize_title(title: Optional[str]) -> str:
    """
    Sanitize project titles.

    - Max 255 characters
    - Single line, collapsed whitespace
    - Required
    """
    text = sanitize_text(title, max_length=TITLE_MAX_LENGTH)
    text = re.sub(r'\s+', ' ', text)
    if not text:
        raise ValidationError("O título do projeto é obrigatório.")
    return text


def sanitize_description(description: Optional[str]) -> str:
    return sanitize_html(description, max_length=10000)


def sanitize_client(client: Optional[str]) -> str:
    text = sanitize_text(client, max_length=CLIENT_MAX_LENGTH)
    return re.sub(r'\s+', ' ', text)


def sanitize_tags(tags: Optional[Iterable]) -> List[str]:
    """
    Normalize a tag list into an ordered set of strings.

    Blank entries are dropped; the first occurrence of a tag wins
    (case-insensitive).
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        raise ValidationError("Tags devem ser enviadas como lista.")

    cleaned = []
    seen = set()
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("Cada tag deve ser um texto.")
        text = re.sub(r'\s+', ' ', sanitize_text(tag, max_length=TAG_MAX_LENGTH))
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        cleaned.append(text)

    if len(cleaned) > MAX_TAGS:
        raise ValidationError(f"Um projeto pode ter no máximo {MAX_TAGS} tags.")
    return cleaned


def validate_url(url: Optional[str], required: bool = False) -> Optional[str]:
    """
    Validate and sanitize http(s) URLs.

    Returns None for blank input unless required.
    """
    if not url:
        if required:
            raise ValidationError("URL é obrigatória.")
        return None

    url = sanitize_text(url, max_length=2048)

    pattern = r'^https?://[^\s<>"{}|\\^`\[\]]+$'
    if not re.match(pattern, url) or not urlsplit(url).hostname:
        raise ValidationError("Formato de URL inválido.")

    return url


def host_matches(url: str, allowed_hosts: Iterable[str]) -> bool:
    """True if the URL's host equals or is a subdomain of an allowed host."""
    allowed = [h.lower() for h in allowed_hosts]
    if not allowed:
        return True
    hostname = (urlsplit(url).hostname or "").lower()
    return any(hostname == h or hostname.endswith("." + h) for h in allowed)
