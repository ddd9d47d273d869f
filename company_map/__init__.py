"""Company map: spreadsheet records geocoded onto an interactive map and globe."""

__version__ = "0.1.0"
