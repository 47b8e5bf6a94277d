"""System prompts module - the core / industry / client prompt hierarchy."""
