class ActionError(ValueError):
    """Raised by data actions when a referenced record is missing or a change is not allowed."""
