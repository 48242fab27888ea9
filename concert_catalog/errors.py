"""Exception types raised by the collaborators around the resolution core."""


class CatalogError(Exception):
    """Base class for all concert catalog errors."""


class ConfigError(CatalogError):
    """Raised when a configuration file is present but cannot be used."""


class ExtractionError(CatalogError):
    """Raised when extraction output is malformed (not JSON, not an array)."""

    def __init__(self, source_name: str, message: str, snippet: str = ""):
        self.source_name = source_name
        self.snippet = snippet
        super().__init__(f"{source_name}: {message}")


class SourceError(CatalogError):
    """Raised by a source when fetching its listings fails."""

    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        super().__init__(f"{source_name}: {message}")
