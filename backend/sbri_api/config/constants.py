"""
Centralized constants for the SBRI backend.

Scoring weights and band cut-points are shared by the risk engine, the
seeding scripts and the startup checks. Import from here instead of
redefining.
"""

# Risk band cut-points on the 0-100 score scale, used when no industry
# specific thresholds record exists
DEFAULT_RISK_THRESHOLDS = {
    'high': 70,
    'medium': 40,
}

# Score composition: margin weighted 65%, sector failure weighted 35%
MARGIN_WEIGHT = 0.65
FAILURE_WEIGHT = 0.35

# A margin at or above this is penalty-free
TARGET_MARGIN = 0.15

SCORE_MIN = 0
SCORE_MAX = 100

RISK_BAND_LABELS = {
    'high': 'High risk band',
    'medium': 'Medium risk band',
    'low': 'Low risk band',
}

# List endpoint limits
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
SEARCH_RESULT_LIMIT = 50
INSOLVENCY_RESULT_LIMIT = 50
