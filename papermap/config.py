"""Configuration constants for the paper map."""

from enum import Enum


class RelationshipType(str, Enum):
    EXTENDS = "extends"
    BUILDS_ON = "builds_on"
    COMPARES_WITH = "compares_with"
    INSPIRED_BY = "inspired_by"
    INSPIRES = "inspires"
    CHALLENGES = "challenges"
    APPLIES = "applies"
    RELATED = "related"


# authored_old_to_new: the record reads "older -> newer" as written, so the
# display edge keeps the authored direction instead of flipping it.
RELATIONSHIP_TYPES = {
    RelationshipType.EXTENDS: {
        "label": "extends",
        "color": "#2563eb",
        "dash": None,
        "inverse": None,
        "authored_old_to_new": False,
    },
    RelationshipType.BUILDS_ON: {
        "label": "builds on",
        "color": "#16a34a",
        "dash": None,
        "inverse": None,
        "authored_old_to_new": False,
    },
    RelationshipType.COMPARES_WITH: {
        "label": "compares with",
        "color": "#f59e0b",
        "dash": "6 3",
        "inverse": None,
        "authored_old_to_new": False,
    },
    RelationshipType.INSPIRED_BY: {
        "label": "inspired by",
        "color": "#8b5cf6",
        "dash": "3 3",
        "inverse": RelationshipType.INSPIRES,
        "authored_old_to_new": False,
    },
    RelationshipType.INSPIRES: {
        "label": "inspires",
        "color": "#9333ea",
        "dash": "3 3",
        "inverse": RelationshipType.INSPIRED_BY,
        "authored_old_to_new": True,
    },
    RelationshipType.CHALLENGES: {
        "label": "challenges",
        "color": "#ef4444",
        "dash": "8 4",
        "inverse": None,
        "authored_old_to_new": False,
    },
    RelationshipType.APPLIES: {
        "label": "applies",
        "color": "#0891b2",
        "dash": None,
        "inverse": None,
        "authored_old_to_new": False,
    },
    RelationshipType.RELATED: {
        "label": "related",
        "color": "#6b7280",
        "dash": "4 4",
        "inverse": None,
        "authored_old_to_new": False,
    },
}

_untyped = set(RelationshipType) - set(RELATIONSHIP_TYPES)
if _untyped:
    raise RuntimeError(
        "RELATIONSHIP_TYPES is missing entries for: "
        + ", ".join(sorted(t.value for t in _untyped))
    )

# Types that are only accepted as input and flipped before storage
INPUT_ONLY_TYPES = {RelationshipType.INSPIRES: RelationshipType.INSPIRED_BY}

MIN_STRENGTH = 1
MAX_STRENGTH = 10
DEFAULT_STRENGTH = 5

CATEGORIES = [
    "csi_compression",
    "autoencoder",
    "quantization",
    "transformer",
    "cnn",
    "other",
]

CATEGORY_COLORS = {
    "csi_compression": "#2563eb",
    "autoencoder": "#7c3aed",
    "quantization": "#dc2626",
    "transformer": "#8b5cf6",
    "cnn": "#10b981",
    "other": "#6b7280",
}

CATEGORY_LABELS = {
    "csi_compression": "CSI Compression",
    "autoencoder": "AutoEncoder",
    "quantization": "Quantization",
    "transformer": "Transformer",
    "cnn": "CNN",
    "other": "Other",
}

FAMILIARITY_LEVELS = ["not_started", "difficult", "moderate", "familiar", "expert"]
FAMILIARITY_PRIORITY = {level: i for i, level in enumerate(FAMILIARITY_LEVELS)}
DEFAULT_FAMILIARITY = "not_started"

FAMILIARITY_LABELS = {
    "not_started": "not started",
    "difficult": "difficult",
    "moderate": "moderately familiar",
    "familiar": "familiar",
    "expert": "expert",
}

# ── Layout ────────────────────────────────────────────────────────────

NODE_WIDTH = 260
NODE_HEIGHT = 120
LAYOUT_DIRECTIONS = ("TB", "LR")
DEFAULT_DIRECTION = "TB"
NODE_SPACING = 60
RANK_SPACING = 100
LAYOUT_MARGIN = 40
ORDER_SWEEPS = 4  # barycenter down+up passes

EDGE_WIDTH_DIVISOR = 3
EDGE_WIDTH_MIN = 1
EDGE_WIDTH_MAX = 4

# ── Recommendations ───────────────────────────────────────────────────

BRIDGE_WEIGHTS = {
    "neighbor": 4.0,
    "path": 0.55,
    "category": 2.5,
    "tag": 1.2,
    "recency_close": 1.25,
    "recency_medium": 0.75,
    "low_familiarity": 1.8,
    "moderate_familiarity": 0.9,
    "importance": 0.45,
}
BRIDGE_TAG_CAP = 3
RECENCY_CLOSE_YEARS = 2
RECENCY_MEDIUM_YEARS = 5
LOW_FAMILIARITY_LEVELS = {"not_started", "difficult"}

DEFAULT_BRIDGE_LIMIT = 5
DEFAULT_REVIEW_LIMIT = 6
DEFAULT_PREVIEW_LIMIT = 4
RECENT_PAPER_YEARS = 2

# ── Host integration ──────────────────────────────────────────────────

MAP_HIDDEN_TAG = "map:hidden"
MAP_SYNC_DEBOUNCE_SECONDS = 0.45
MAP_SYNC_RETRY_SECONDS = 1.2
MAP_SYNC_MAX_ATTEMPTS = 5
