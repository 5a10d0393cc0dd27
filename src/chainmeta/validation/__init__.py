"""Validation of the metadata lists and hub metadata coverage checks."""

from .api_metadata import check_api_metadata
from .schema import ValidationReport, validate_metadata

__all__ = ["ValidationReport", "check_api_metadata", "validate_metadata"]
