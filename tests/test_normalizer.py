from __future__ import annotations

from candidate_sync.schemas.candidates import Candidate
from candidate_sync.services.normalizer import (
    describe_candidate,
    normalize_candidate,
    normalize_roster_entry,
    resolve_field,
    score_value,
    short_skills,
    summary_preview,
)


def test_normalize_candidate_reads_drifted_labels() -> None:
    candidate = normalize_candidate(
        {
            "Name ": "Asha Verma",
            "Email": "asha@example.com",
            "Overall Score ": "8.5",
            "Current Organization\n": "Acme",
            "Summry": "Backend engineer.",
            "Years of relevent experience": "4",
        }
    )

    assert candidate.name == "Asha Verma"
    assert candidate.overall_score == "8.5"
    assert candidate.organization == "Acme"
    assert candidate.summary == "Backend engineer."
    assert candidate.experience_years == "4"


def test_normalize_candidate_defaults_missing_fields() -> None:
    candidate = normalize_candidate({"Email": "x@example.com"})

    assert candidate.name == ""
    assert candidate.display_name == "Unknown"
    assert candidate.technical_score == "0"
    assert candidate.overall_score == "0"
    assert candidate.designation == ""


def test_resolve_field_prefers_exact_non_empty_then_folded_match() -> None:
    record = {"Overall Score": "", "OVERALL  score": "6"}

    assert resolve_field(record, ("Overall Score", "Overall Score ")) == "6"
    assert resolve_field({"Overall Score": "7", "Overall Score ": "9"}, ("Overall Score", "Overall Score ")) == "7"
    assert resolve_field({}, ("Overall Score",), default="0") == "0"


def test_normalize_roster_entry_and_status() -> None:
    pending = normalize_roster_entry({"Name": "Ann", "Email": "ann@example.com", "Phone Number": "12345678"})
    scheduled = normalize_roster_entry({"Name": "Bob", "Interview Date": "12/3/2024"})

    assert pending.phone_number == "12345678"
    assert pending.status == "Pending"
    assert scheduled.status == "Completed"


def test_short_skills_splits_and_counts_remainder() -> None:
    assert short_skills("Python, Go, Rust, C++, Java") == (["Python", "Go", "Rust"], 2)
    assert short_skills(" Python ,, Go ") == (["Python", "Go"], 0)
    assert short_skills("") == ([], 0)


def test_summary_preview_falls_back_and_truncates() -> None:
    candidate = Candidate(summary="word " * 60)

    preview = summary_preview(candidate, max_chars=20)

    assert len(preview) <= 20
    assert preview.endswith("…")
    assert summary_preview(Candidate(quick_read="Short read", summary="Long summary")) == "Short read"


def test_score_value_is_best_effort() -> None:
    assert score_value("7.5") == 7.5
    assert score_value(" 8/10 ") == 8.0
    assert score_value("n/a") == 0.0
    assert score_value("nan") == 0.0
    assert score_value("") == 0.0


def test_derived_views_follow_source_field() -> None:
    candidate = Candidate(name="Ann", email="ann@example.com", technical_skills="SQL, Pandas, Spark, dbt")

    view = describe_candidate(candidate, skill_limit=2, processing=True)
    edited = describe_candidate(candidate.model_copy(update={"technical_skills": "SQL"}))

    assert view.short_skills == ["SQL", "Pandas"]
    assert view.more_skills_count == 2
    assert view.skills == ["SQL", "Pandas", "Spark", "dbt"]
    assert view.processing is True
    assert edited.skills == ["SQL"]
    assert edited.more_skills_count == 0
