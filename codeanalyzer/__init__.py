"""codeanalyzer: architectural role classification and criteria checks for project trees."""

__version__ = "0.1.0"
