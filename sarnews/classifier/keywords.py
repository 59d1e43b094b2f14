"""Keyword tables for relevance, category and sub-region detection."""

from typing import Dict, List

DEFAULT_CATEGORY = "general"
DEFAULT_REGION = "sarawak"

# Place names, communities and political entities that mark an item as regional.
REGIONAL_KEYWORDS: List[str] = [
    "sarawak",
    "kuching",
    "sibu",
    "miri",
    "bintulu",
    "sri aman",
    "kapit",
    "limbang",
    "mukah",
    "betong",
    "sarikei",
    "serian",
    "dayak",
    "iban",
    "bidayuh",
    "orang ulu",
    "penan",
    "abang johari",
    "gps",
    "gabungan parti sarawak",
    "batang ai",
    "rajang",
    "sarawakian",
]

# Order matters only for readability; ties resolve to DEFAULT_CATEGORY.
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "politics": [
        "minister", "government", "election", "parliament", "gps", "dap", "pkr", "bn", "pn",
        "vote", "politician", "assembly", "premier", "chief minister", "abang johari", "policy",
        "cabinet",
    ],
    "economy": [
        "economy", "business", "trade", "investment", "gdp", "export", "import", "market",
        "stock", "ringgit", "bank", "finance", "industry", "company", "corporate", "revenue",
        "profit",
    ],
    "sports": [
        "sports", "football", "soccer", "badminton", "athlete", "tournament", "championship",
        "medal", "olympics", "games", "league", "match", "team", "player", "coach",
    ],
    "crime": [
        "crime", "police", "arrest", "court", "jail", "prison", "murder", "robbery", "theft",
        "drug", "suspect", "investigation", "charge", "sentence", "victim",
    ],
    "environment": [
        "environment", "forest", "wildlife", "climate", "pollution", "conservation", "nature",
        "river", "flood", "drought", "deforestation", "palm oil", "green", "sustainable",
    ],
    "culture": [
        "culture", "festival", "tradition", "heritage", "dayak", "iban", "bidayuh", "orang ulu",
        "gawai", "music", "art", "dance", "celebration", "ceremony", "ethnic",
    ],
    "education": [
        "education", "school", "university", "student", "teacher", "exam", "scholarship",
        "graduate", "college", "learning", "academic",
    ],
    "health": [
        "health", "hospital", "doctor", "patient", "covid", "vaccine", "disease", "medical",
        "clinic", "medicine", "treatment", "outbreak",
    ],
    "infrastructure": [
        "infrastructure", "road", "highway", "bridge", "airport", "port", "construction",
        "development", "project", "building", "facility",
    ],
    "tourism": [
        "tourism", "tourist", "hotel", "travel", "destination", "visitor", "attraction",
        "heritage", "beach", "resort",
    ],
}

# Latin and Chinese spellings of each locality.
REGION_KEYWORDS: Dict[str, List[str]] = {
    "kuching": ["kuching", "古晋"],
    "sibu": ["sibu", "诗巫"],
    "miri": ["miri", "美里"],
    "bintulu": ["bintulu", "民都鲁"],
}

CATEGORIES: List[str] = list(CATEGORY_KEYWORDS) + [DEFAULT_CATEGORY]
