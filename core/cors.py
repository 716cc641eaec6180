"""
Cross-origin policy.

Development: local Vite/preview servers plus FRONTEND_URL.
Any other mode (production, test): known origins plus any subdomain of
github.io or athleonglobal.in.
"""
from typing import Any, Dict, List, Optional

from core.config import Settings

DEVELOPMENT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
]

PRODUCTION_ORIGINS = [
    "https://athleonglobal.in",
    "https://www.athleonglobal.in",
    "https://ujjwalkumar2620.github.io",
]

# Any subdomain of github.io (GitHub Pages) or athleonglobal.in. Starlette fullmatches this.
PRODUCTION_ORIGIN_REGEX = r"https?://([A-Za-z0-9-]+\.)+(github\.io|athleonglobal\.in)(:\d+)?"

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]


def allowed_origins(settings: Settings) -> List[str]:
    frontend = [settings.FRONTEND_URL.rstrip("/")] if settings.FRONTEND_URL else []
    if settings.is_development:
        origins = DEVELOPMENT_ORIGINS + frontend
    else:
        origins = frontend + PRODUCTION_ORIGINS
    return list(dict.fromkeys(origins))


def build_cors_options(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for starlette's CORSMiddleware."""
    origin_regex: Optional[str] = None if settings.is_development else PRODUCTION_ORIGIN_REGEX
    return {
        "allow_origins": allowed_origins(settings),
        "allow_origin_regex": origin_regex,
        "allow_credentials": True,
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ALLOWED_HEADERS,
    }
