"""Users module - user accounts and refresh token storage."""
