from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime

from ..models.team import TeamMemberInfo

"""Staff enrollment SQL for roster members missing from the directory.

Output is a reviewable script, never executed by the importer: each block
links an existing auth user (matched by a suggested e-mail the operator is
expected to correct) to a users_metadata row for the firm.
"""

__all__ = [
    "DEFAULT_EMAIL_DOMAIN",
    "generate_enrollment_sql",
    "suggest_email",
]

DEFAULT_EMAIL_DOMAIN = "example.com"
_EMAIL_UNSAFE = re.compile(r"[^a-z0-9.]")


def _quote(value: str) -> str:
    return value.replace("'", "''")


def suggest_email(name: str, domain: str = DEFAULT_EMAIL_DOMAIN) -> str:
    local = _EMAIL_UNSAFE.sub("", re.sub(r"\s+", ".", name.strip().lower()))
    return f"{local}@{domain}"


def generate_enrollment_sql(
    members: Iterable[TeamMemberInfo],
    firm_id: str,
    firm_name: str | None = None,
    *,
    email_domain: str = DEFAULT_EMAIL_DOMAIN,
) -> str:
    """Render the enrollment script for ``members`` (usually the unmatched ones)."""
    members = list(members)
    stamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%SZ")
    lines = [
        "-- Staff enrollment for imported roster",
        f"-- Firm: {firm_name or firm_id} ({firm_id})",
        f"-- Generated: {stamp}",
        f"-- Members: {len(members)}",
        "--",
        "-- 1. Create each user in the auth provider with the e-mail below",
        "--    (replace the suggested address with the real one).",
        "-- 2. Run this script to attach the user to the firm.",
        "",
    ]
    for member in members:
        email = suggest_email(member.clean_name, email_domain)
        lines.extend([
            f"-- {member.name} ({member.role.value}, {member.count} case(s))",
            f"-- context: {member.context}",
            "INSERT INTO users_metadata (id, name, role, firm_id, is_active)",
            f"SELECT auth.users.id, '{_quote(member.clean_name)}', '{member.role.value}', "
            f"'{_quote(firm_id)}'::uuid, true",
            f"FROM auth.users WHERE auth.users.email = '{_quote(email)}'",
            "ON CONFLICT (id) DO UPDATE SET name = EXCLUDED.name, role = EXCLUDED.role, "
            "firm_id = EXCLUDED.firm_id, is_active = true;",
            "",
        ])
    return "\n".join(lines)
