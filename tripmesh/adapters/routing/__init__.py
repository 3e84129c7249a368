"""Single-profile routing collaborators."""
