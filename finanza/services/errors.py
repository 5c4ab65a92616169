class InvalidInputError(ValueError):
    """Raised when an engine input would otherwise produce a silently wrong number."""
    pass
