"""Companies module - the tenant record and its settings."""
