"""Shared (non-domain) exceptions."""


class AdapterFault(Exception):
    """A single source or collaborator failed (network, parse, quota)."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"[{source}] {message}")


class KeyMissingError(Exception):
    """Required key is missing."""

    def __init__(self, name: str):
        self.key_name = name
        super().__init__(f"Missing required API key: {name} (configure it in .env)")
