# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Risk text normalisation for embedding and matched-field hints."""

from __future__ import annotations

from riskscope.models.risk import CorpusEntry


def combine_risk_text(
    title: str | None,
    threat_description: str | None = None,
    description: str | None = None,
) -> str:
    """Join the similarity fields as ``Title: .. Threat: .. Description: ..``.

    Blank fields are skipped, so a title-only risk embeds as just its title.
    """
    parts: list[str] = []
    if title and title.strip():
        parts.append(f"Title: {title.strip()}")
    if threat_description and threat_description.strip():
        parts.append(f"Threat: {threat_description.strip()}")
    if description and description.strip():
        parts.append(f"Description: {description.strip()}")
    return " ".join(parts)


def entry_text(entry: CorpusEntry) -> str:
    return combine_risk_text(entry.title, entry.threat_description, entry.description)


def matched_fields(query: CorpusEntry, other: CorpusEntry) -> list[str]:
    """Cheap hint of which fields overlap, for display next to a score.

    ``title`` when either title contains the other (case-insensitive);
    ``threatDescription`` / ``description`` when both risks fill that field.
    """
    fields: list[str] = []
    q_title = (query.title or "").strip().lower()
    o_title = (other.title or "").strip().lower()
    if q_title and o_title and (q_title in o_title or o_title in q_title):
        fields.append("title")
    if (query.threat_description or "").strip() and (other.threat_description or "").strip():
        fields.append("threatDescription")
    if (query.description or "").strip() and (other.description or "").strip():
        fields.append("description")
    return fields
