"""Application-wide constants.

This module centralizes magic numbers that are used across multiple modules.
Values that need to be configurable at runtime go in config.py instead.
"""

# ===================
# Password Policy
# ===================

MIN_PASSWORD_LENGTH = 8

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


# ===================
# Tokens
# ===================

# Value of the ``purpose`` claim carried by password-reset tokens
PASSWORD_RESET_PURPOSE = "password-reset"


# ===================
# Profile Validation
# ===================

MIN_GRADUATION_YEAR = 1950
MAX_GRADUATION_YEAR = 2035
MAX_NAME_LENGTH = 50
MAX_UNIVERSITY_LENGTH = 100


# ===================
# Rate Limiting
# ===================

# Probability of running the rate limiter's stale-record cleanup per request
RATE_LIMIT_CLEANUP_PROBABILITY = 0.01

# Records untouched for this long are dropped during cleanup
RATE_LIMIT_CLEANUP_MAX_AGE_SECONDS = 3600
