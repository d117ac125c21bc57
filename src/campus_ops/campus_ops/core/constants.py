"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60

# Gate entry window around a class's nominal times (fixed policy, not per class).
ENTRY_OPENS_BEFORE_MINUTES = 60
ENTRY_CLOSES_AFTER_MINUTES = 15
FALLBACK_SESSION_MINUTES = 240

UNASSIGNED_ROOM = "TBD"
UNASSIGNED_TEACHER = "TBD"
RECEIPT_TOKEN_PREFIX = "TOKEN-"
MIN_SCAN_CODE_LENGTH = 5
MIN_SEARCH_QUERY_LENGTH = 2
SEARCH_RESULT_LIMIT = 10

DEFAULT_BARCODE_PREFIX = "EDW"
DEFAULT_CURRENCY_LABEL = "PKR"
