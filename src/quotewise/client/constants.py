"""Storage keys shared by every session storage backend."""

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
TOKEN_EXPIRY_KEY = "tokenExpiry"
LAST_LOGIN_SUCCESS_KEY = "lastLoginSuccess"
REDIRECT_URL_KEY = "auth_redirect_url"

SESSION_KEYS = (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    TOKEN_EXPIRY_KEY,
    LAST_LOGIN_SUCCESS_KEY,
    REDIRECT_URL_KEY,
)
