from __future__ import annotations

from datetime import date

from ..models.config_models import LimitationConfig

"""Limitation deadline: date of loss plus the standard period, with the
minority extension (a client under 18 at the date of loss has until their
20th birthday)."""

__all__ = [
    "add_years",
    "age_on",
    "compute_limitation_date",
]


def add_years(d: date, years: int) -> date:
    """Same month/day ``years`` later; Feb 29 falls back to Feb 28."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def age_on(birth: date, on: date) -> int:
    """Completed years of age on a given day."""
    had_birthday = (on.month, on.day) >= (birth.month, birth.day)
    return on.year - birth.year - (0 if had_birthday else 1)


def compute_limitation_date(
    date_of_loss: str | date,
    birth_date: str | date | None = None,
    config: LimitationConfig | None = None,
) -> str:
    """Return the limitation deadline as ``YYYY-MM-DD``.

    Both dates are canonical strings (or dates); the validator guarantees that
    for date of loss, and an unusable birth date simply disables the minority rule.
    """
    cfg = config or LimitationConfig()
    dol = date_of_loss if isinstance(date_of_loss, date) else date.fromisoformat(date_of_loss)

    dob: date | None = None
    if isinstance(birth_date, date):
        dob = birth_date
    elif birth_date:
        try:
            dob = date.fromisoformat(birth_date)
        except ValueError:
            dob = None

    if dob is not None and dob <= dol and age_on(dob, dol) < cfg.minority_age:
        return add_years(dob, cfg.minority_deadline_age).isoformat()
    return add_years(dol, cfg.standard_years).isoformat()
