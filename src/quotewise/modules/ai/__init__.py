"""AI module - prompt composition previews and completion calls."""
