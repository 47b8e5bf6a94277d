"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Hash lengths
SHA256_HEX_LENGTH = 64

# String field lengths
MAX_USERNAME_LENGTH = 50
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_IPV6_LENGTH = 45
MAX_DESCRIPTION_LENGTH = 255
MAX_URL_LENGTH = 2048
MAX_PHONE_LENGTH = 50
MAX_QUOTE_NUMBER_LENGTH = 50

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Token settings
REFRESH_TOKEN_BYTES = 32
TOKEN_TYPE_ACCESS = "access"

# Prompt composition
CLIENT_CONTEXT_QUOTE_LIMIT = 5
CLIENT_CONTEXT_PREFIX = "Additional client-specific context: "
TRAINING_EXAMPLE_LIMIT = 3
TRAINING_EXAMPLES_PREFIX = "Examples of answers this company considers good:\n\n"
MAX_CATEGORY_LENGTH = 100

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
