"""Projection of drifting spreadsheet rows onto the stable candidate and roster schemas.

Upstream column labels are not contractually fixed: the same logical column has
been seen as ``"Overall Score"`` and ``"Overall Score "``, ``"Current
Organization"`` and ``"Current Organization\\n"``, ``"Summary"`` and
``"Summry"``. Each field therefore carries an ordered label list (canonical
first, then known variants). Resolution takes the first non-empty exact match,
then any record key equal to one of the labels once whitespace is folded and
case ignored, then the field default.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence

from candidate_sync.schemas.candidates import Candidate, CandidateOut, split_skills
from candidate_sync.schemas.roster import RosterEntry

_WHITESPACE_RE = re.compile(r"\s+")

CANDIDATE_FIELDS: dict[str, tuple[str, ...]] = {
    "name": ("Name", "Name ", "Full Name", "Candidate Name"),
    "email": ("Email", "Email ", "Email ID", "Email Address"),
    "mobile": ("Mobile no", "Mobile No", "Mobile", "Phone Number"),
    "designation": ("Designation",),
    "organization": ("Current Organization", "Current Organization\n", "Organization"),
    "education": ("Education",),
    "technical_skills": ("Technical skill", "Technical skills", "Technical Skills"),
    "experience_years": ("Years of relevant experience", "Years of relevent experience"),
    "total_experience_years": ("Years of total experience", "Total experience"),
    "experience_type": ("Experience Type",),
    "technical_score": ("Technical Score",),
    "experience_score": ("Experience Score",),
    "achievements_score": ("Achievements Score",),
    "education_score": ("Education Score",),
    "overall_score": ("Overall Score", "Overall Score ", "OverAll Score"),
    "summary": ("Summary", "Summry"),
    "quick_read": ("Quick read", "Quick Read"),
    "projects_and_achievements": ("Projects & Achievements", "Projects & Achievements\n"),
    "job_role_candidate": ("Job Role Candidate", "Job Role"),
}

ROSTER_FIELDS: dict[str, tuple[str, ...]] = {
    "name": ("Name", "Name "),
    "email": ("Email", "Email "),
    "phone_number": ("Phone Number", "Phone number", "Mobile no"),
    "job_role_admin": ("Job Role Admin", "Job Role"),
    "datetime": ("Datetime", "Date Time", "Timestamp"),
    "interview_status": ("Interview Status",),
    "interview_scheduled": ("Interview Scheduled",),
    "interview_date": ("Interview Date",),
}

SCORE_FIELDS = frozenset(
    {"technical_score", "experience_score", "achievements_score", "education_score", "overall_score"}
)


def fold_label(label: str) -> str:
    return _WHITESPACE_RE.sub(" ", label).strip().casefold()


def resolve_field(record: Mapping[str, str], labels: Sequence[str], default: str = "") -> str:
    for label in labels:
        value = _as_text(record.get(label))
        if value:
            return value

    wanted = {fold_label(label) for label in labels}
    for key, raw_value in record.items():
        if not isinstance(key, str) or fold_label(key) not in wanted:
            continue
        value = _as_text(raw_value)
        if value:
            return value
    return default


def normalize_candidate(record: Mapping[str, str]) -> Candidate:
    values = {
        field: resolve_field(record, labels, default="0" if field in SCORE_FIELDS else "")
        for field, labels in CANDIDATE_FIELDS.items()
    }
    return Candidate(**values)


def normalize_roster_entry(record: Mapping[str, str]) -> RosterEntry:
    values = {field: resolve_field(record, labels) for field, labels in ROSTER_FIELDS.items()}
    return RosterEntry(**values)


def short_skills(text: str, limit: int = 3) -> tuple[list[str], int]:
    """First ``limit`` skills of a comma-separated list plus how many were left out."""
    skills = split_skills(text)
    return skills[:limit], max(0, len(skills) - limit)


def summary_preview(candidate: Candidate, max_chars: int = 160) -> str:
    text = _WHITESPACE_RE.sub(" ", candidate.quick_read or candidate.summary).strip()
    if len(text) <= max_chars:
        return text
    return text[: max(0, max_chars - 1)].rstrip() + "…"


def score_value(raw: str) -> float:
    cleaned = raw.strip()
    if "/" in cleaned:
        cleaned = cleaned.split("/", maxsplit=1)[0].strip()
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def describe_candidate(
    candidate: Candidate,
    *,
    skill_limit: int = 3,
    preview_chars: int = 160,
    processing: bool = False,
) -> CandidateOut:
    shown, remainder = short_skills(candidate.technical_skills, skill_limit)
    return CandidateOut(
        **candidate.model_dump(),
        display_name=candidate.display_name,
        overall_score_value=score_value(candidate.overall_score),
        summary_preview=summary_preview(candidate, preview_chars),
        skills=candidate.skills,
        short_skills=shown,
        more_skills_count=remainder,
        processing=processing,
    )


def _as_text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""
