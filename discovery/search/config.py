from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SearchConfig:
    default_page_limit: int = 50
    max_page_limit: int = 200
    retrieval_timeout: float = float(os.getenv("DISCOVERY_RETRIEVAL_TIMEOUT", "3.0"))
    suggestion_limit: int = 10
    suggestions_per_facet: int = 5
    travel_mode: str = os.getenv("DISCOVERY_TRAVEL_MODE", "driving")
    recent_search_limit: int = 5
    nearby_radius_km: float = 10.0


DEFAULT_SEARCH_CONFIG = SearchConfig()
