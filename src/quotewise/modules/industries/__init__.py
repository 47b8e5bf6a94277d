"""Industries module - industry catalogue administered by admins."""
