# ==============================================================================
# Classifiers - User Agent and Traffic Source
# ==============================================================================
"""
Pure classification functions for user agents, referrers and landing URLs.

None of these functions raise: unrecognized or malformed input degrades to
"Unknown" (or "desktop" for the device class, which is the default branch
when no tablet or mobile pattern matches).
"""

import re
from urllib.parse import parse_qs, urlparse

from clicksignals.core.models import DeviceInfo, ReferrerAttribution, UtmParams

# ==============================================================================
# Lookup Tables
# ==============================================================================

# (hostname substring, source name, search term query parameter)
SEARCH_ENGINES: tuple[tuple[str, str, str], ...] = (
    ("google", "Google", "q"),
    ("bing", "Bing", "q"),
    ("yahoo", "Yahoo", "p"),
    ("duckduckgo", "DuckDuckGo", "q"),
    ("baidu", "Baidu", "wd"),
)

# (hostname substrings, source name)
SOCIAL_PLATFORMS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("facebook", "fb.com"), "Facebook"),
    (("twitter",), "Twitter"),
    (("linkedin",), "LinkedIn"),
    (("instagram",), "Instagram"),
    (("reddit",), "Reddit"),
    (("youtube",), "YouTube"),
    (("tiktok",), "TikTok"),
)

# Short-link hosts are matched as whole hosts, not substrings
SHORT_LINK_HOSTS: dict[str, str] = {
    "t.co": "Twitter",
}

EMAIL_MARKERS = ("mail", "email")

DIRECT = "Direct"
UNKNOWN = "Unknown"

TABLET_PATTERN = re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE)
MOBILE_PATTERN = re.compile(
    r"Mobile|Android|iP(hone|od)|IEMobile|BlackBerry|Kindle|Silk-Accelerated"
    r"|(hpw|web)OS|Opera M(obi|ini)"
)

# Order matters: Edge and Opera UAs also contain "Chrome", and Chrome UAs
# also contain "Safari".
BROWSERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Edg/", "Edge"), "Edge"),
    (("OPR", "Opera"), "Opera"),
    (("Firefox", "FxiOS"), "Firefox"),
    (("Chrome", "CriOS"), "Chrome"),
    (("Safari",), "Safari"),
)

# Android UAs contain "Linux" and iOS UAs contain "Mac OS X".
OPERATING_SYSTEMS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Win",), "Windows"),
    (("Android",), "Android"),
    (("iPhone", "iPad", "iPod", "iOS"), "iOS"),
    (("Mac",), "MacOS"),
    (("Linux", "X11"), "Linux"),
)


# ==============================================================================
# Referrer
# ==============================================================================


def _query_param(query: str, name: str) -> str | None:
    values = parse_qs(query).get(name)
    if not values or not values[0]:
        return None
    return values[0]


def classify_referrer(referrer_url: str | None) -> ReferrerAttribution:
    """
    Classify the traffic source of a referrer URL.

    Known search engines are checked first (each with its own search term
    parameter), then social platforms, then an email heuristic. Anything
    else is attributed to the bare hostname.

    Args:
        referrer_url: Referrer URL, empty or None for direct traffic

    Returns:
        ReferrerAttribution with source "Direct" when there is no referrer
        and "Unknown" when the referrer cannot be parsed
    """
    if not referrer_url:
        return ReferrerAttribution(source=DIRECT)

    try:
        parsed = urlparse(referrer_url)
        hostname = parsed.hostname
    except (TypeError, ValueError):
        return ReferrerAttribution(source=UNKNOWN)

    if not parsed.scheme or not hostname:
        return ReferrerAttribution(source=UNKNOWN)

    hostname = hostname.lower()

    for marker, source, param in SEARCH_ENGINES:
        if marker in hostname:
            return ReferrerAttribution(source=source, search_term=_query_param(parsed.query, param))

    for markers, source in SOCIAL_PLATFORMS:
        if any(marker in hostname for marker in markers):
            return ReferrerAttribution(source=source)

    for host, source in SHORT_LINK_HOSTS.items():
        if hostname == host or hostname.endswith("." + host):
            return ReferrerAttribution(source=source)

    if any(marker in hostname for marker in EMAIL_MARKERS):
        return ReferrerAttribution(source="Email")

    return ReferrerAttribution(source=re.sub(r"^www\.", "", hostname))


def extract_utm(url: str | None) -> UtmParams:
    """Extract utm_source/medium/campaign/term from a URL's query string."""
    if not url:
        return UtmParams()
    try:
        query = urlparse(url).query
    except (TypeError, ValueError):
        return UtmParams()
    return UtmParams(
        utm_source=_query_param(query, "utm_source"),
        utm_medium=_query_param(query, "utm_medium"),
        utm_campaign=_query_param(query, "utm_campaign"),
        utm_term=_query_param(query, "utm_term"),
    )


def attribute_traffic(referrer_url: str | None, landing_url: str | None) -> ReferrerAttribution:
    """Classify the referrer, falling back to utm_term for the search term."""
    attribution = classify_referrer(referrer_url)
    if attribution.search_term is None:
        attribution.search_term = extract_utm(landing_url).utm_term
    return attribution


def page_path(url: str | None) -> str:
    """Path component of a URL, "/" when absent or unparseable."""
    if not url:
        return "/"
    try:
        return urlparse(url).path or "/"
    except (TypeError, ValueError):
        return "/"


# ==============================================================================
# User Agent
# ==============================================================================


def classify_device(user_agent: str | None) -> str:
    """Device class: tablet before mobile before desktop."""
    if not isinstance(user_agent, str):
        return "desktop"
    if TABLET_PATTERN.search(user_agent):
        return "tablet"
    if MOBILE_PATTERN.search(user_agent):
        return "mobile"
    return "desktop"


def _match_first(user_agent: str | None, table: tuple[tuple[tuple[str, ...], str], ...]) -> str:
    if not isinstance(user_agent, str):
        return UNKNOWN
    for markers, name in table:
        if any(marker in user_agent for marker in markers):
            return name
    return UNKNOWN


def classify_browser(user_agent: str | None) -> str:
    return _match_first(user_agent, BROWSERS)


def classify_os(user_agent: str | None) -> str:
    return _match_first(user_agent, OPERATING_SYSTEMS)


def classify_user_agent(user_agent: str | None) -> DeviceInfo:
    """Full device/browser/OS classification of a user agent."""
    return DeviceInfo(
        type=classify_device(user_agent),
        browser=classify_browser(user_agent),
        os=classify_os(user_agent),
    )
