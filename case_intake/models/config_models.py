from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the case roster importer.

These are the typed view of config/import.yml; the loader in
case_intake/config/loader.py validates the raw YAML and builds them.
"""

DEFAULT_HEADER_TOKENS: tuple[str, ...] = ("client",)
DEFAULT_ASSIGNED_PERSON_KEYWORDS: tuple[str, ...] = ("lawyer", "attorney", "assigned")


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ParsingConfig:
    """Knobs for tokenizing and mapping a roster export."""
    header_tokens: tuple[str, ...] = DEFAULT_HEADER_TOKENS
    # Canonical field -> extra header spellings (tried before the built-in ones)
    column_aliases: dict[str, list[str]] = field(default_factory=dict)
    assigned_person_keywords: tuple[str, ...] = DEFAULT_ASSIGNED_PERSON_KEYWORDS
    keep_unmapped_columns: bool = True  # 未定義列の値を notes に残す


@dataclass(frozen=True)
class LimitationConfig:
    """Limitation deadline rule: standard offset plus minority extension."""
    standard_years: int = 2
    minority_age: int = 18
    minority_deadline_age: int = 20


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    firm_id: str | None = None  # Tenant; the CLI --firm-id flag overrides it
    firm_name: str | None = None
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    limitation: LimitationConfig = field(default_factory=LimitationConfig)
    progress_every: int = 5
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
