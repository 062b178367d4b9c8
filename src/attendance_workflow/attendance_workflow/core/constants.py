"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SUBMISSION_DEADLINE_HOURS = 24
UNKNOWN_ACTOR_NAME = "Unknown"
DEFAULT_LIST_LIMIT = 500
