class CompanyMapError(Exception):
    """Base class for errors surfaced to the user."""


class SpreadsheetLoadError(CompanyMapError):
    def __init__(self, message, source=None, status=None):
        super().__init__(message)
        self.source = source
        self.status = status


class MissingColumnsError(CompanyMapError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class GeocodeError(CompanyMapError):
    """The geocoding service failed; distinct from "no result"."""

    def __init__(self, query, reason):
        self.query = query
        super().__init__(f'Geocode failed for "{query}" ({reason})')
