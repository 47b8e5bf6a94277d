"""Training module - example exchanges a company wants the assistant to imitate."""
