"""Multi-mode directions collaborators."""
