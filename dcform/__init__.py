"""DataCite metadata validation and canonicalization engine."""

__version__ = "0.1.0"
