from __future__ import annotations

import re
from typing import Literal

Platform = Literal["instagram", "tiktok", "youtube", "facebook", "linkedin"]

_PLATFORM_HOST_PATTERNS: tuple[tuple[Platform, tuple[re.Pattern[str], ...]], ...] = (
    ("instagram", (re.compile(r"(^|[./])instagram\.com(/|$)"), re.compile(r"(^|[./])instagr\.am(/|$)"))),
    ("tiktok", (re.compile(r"(^|[./])tiktok\.com(/|$)"),)),
    ("youtube", (re.compile(r"(^|[./])youtube\.com(/|$)"), re.compile(r"(^|[./])youtu\.be(/|$)"))),
    ("facebook", (re.compile(r"(^|[./])facebook\.com(/|$)"), re.compile(r"(^|[./])fb\.(com|watch)(/|$)"))),
    ("linkedin", (re.compile(r"(^|[./])linkedin\.com(/|$)"),)),
)

_SHORTCODE_RE = re.compile(r"/(?:p|reel|tv)/([A-Za-z0-9_-]+)/?")

_PLACEHOLDERS: dict[Platform, str] = {
    "facebook": "/placeholders/facebook-video.svg",
    "linkedin": "/placeholders/linkedin-video.svg",
    "tiktok": "/placeholders/tiktok-video.svg",
    "youtube": "/placeholders/youtube-video.svg",
    "instagram": "/placeholders/instagram-video.svg",
}


def _host_and_path(url: str) -> str:
    value = (url or "").strip().lower()
    value = re.sub(r"^[a-z][a-z0-9+.-]*://", "", value)
    return value


def detect_platform(url: str | None) -> Platform | None:
    """Best-effort platform detection from a content URL's host."""
    value = _host_and_path(url or "")
    if not value:
        return None

    host = value.split("/", 1)[0].split(":", 1)[0]
    for platform, patterns in _PLATFORM_HOST_PATTERNS:
        if any(p.search(host) for p in patterns):
            return platform
    return None


def extract_shortcode(url: str | None) -> str | None:
    """Return the Instagram shortcode from a /p/, /reel/ or /tv/ URL."""
    if not url:
        return None
    match = _SHORTCODE_RE.search(url)
    return match.group(1) if match else None


def placeholder_thumbnail(url: str | None, default: str) -> str:
    platform = detect_platform(url)
    if platform is None:
        return default
    return _PLACEHOLDERS[platform]
