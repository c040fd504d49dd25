"""Domain models for the case roster importer.

This package contains the domain model classes used throughout the application:
raw rows, normalized case records, validation outcomes, team members and
import results.
"""

from .case_record import BenefitType, CaseStatus, ParsedCaseRecord
from .config_models import DatabaseConfig, ImportConfig, LimitationConfig, ParsingConfig
from .error_record import ErrorRecord
from .import_result import ImportFailure, ImportResult, NewCase
from .row_data import RowData
from .team import StaffMember, StaffRole, TeamMemberInfo
from .validation import ParseReport, ValidationOutcome, ValidationReport

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "LimitationConfig",
    "ParsingConfig",
    # Parsing models
    "RowData",
    "ParsedCaseRecord",
    "CaseStatus",
    "BenefitType",
    "ValidationOutcome",
    "ValidationReport",
    "ParseReport",
    # Team models
    "StaffMember",
    "StaffRole",
    "TeamMemberInfo",
    # Import models
    "ErrorRecord",
    "ImportFailure",
    "ImportResult",
    "NewCase",
]
