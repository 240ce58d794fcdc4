"""Shared test fixtures."""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from insight.config import load_config

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)

SHARED_SUMMARY = "Offer a free tier to small business teams priced out by competitors"

CITATIONS = {
    "pricing": {
        "url": "https://acme.example/pricing",
        "source_type": "pricing",
        "published_at": "2025-03-15T08:00:00Z",
    },
    "reviews": {
        "url": "https://g2.example/acme/reviews",
        "source_type": "reviews",
        "published_at": "2025-03-10T00:00:00Z",
    },
    "changelog": {
        "url": "https://globex.example/changelog",
        "source_type": "changelog",
        "published_at": "2024-11-01",
    },
    "docs": {
        "url": "https://globex.example/docs",
        "type": "Docs",
        "extracted_at": "2025-02-20T00:00:00Z",
    },
    "jobs": {
        "url": "https://initech.example/careers",
        "source_type": "jobs",
    },
    "status": {
        "url": "https://initech.example/status",
        "source_type": "status",
        "date": "not a date",
    },
}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_config(tmp_path):
    """Config file with a couple of overrides on top of the defaults."""
    config_text = """
compress:
  similarity_threshold: 0.6

assumptions:
  max_items: 15

readout:
  top_n: 3

logging:
  level: "WARNING"
"""
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text)
    return load_config(str(cfg_path))


@pytest.fixture
def opportunities_v3():
    """Opportunities artifact content in the v3 shape (nested scoring, proof points)."""
    c = copy.deepcopy(CITATIONS)
    return {
        "meta": {
            "schema_version": 3,
            "run_id": "run-3",
            "generated_at": "2025-03-14T10:00:00Z",
        },
        "opportunities": [
            {
                "id": "opp-free-tier",
                "title": "Free tier expansion for SMB",
                "summary": SHARED_SUMMARY,
                "one_liner": "Win SMB teams with a generous free tier",
                "type": "pricing_packaging",
                "why_now": "Competitors raised entry prices in the last quarter",
                "problem_today": "Small teams churn at the paywall",
                "customer": "SMB operations leads",
                "proposed_move": "Launch a free tier capped at 3 seats",
                "experiments": [{"hypothesis": "Free tier lifts signups by 30%"}],
                "scoring": {"total": 82, "breakdown": {"recencyConfidence": 8}},
                "tradeoffs": {
                    "why_competitors_wont_follow": ["Incumbents depend on seat-based revenue"],
                    "capability_forced": ["Self-serve onboarding in under 10 minutes"],
                    "what_we_say_no_to": ["Enterprise custom contracts"],
                },
                "proof_points": [
                    {
                        "claim": "Entry prices rose",
                        "citations": [c["pricing"], c["reviews"]],
                    },
                    {
                        "claim": "Competitors ship slowly",
                        "citations": [c["changelog"], c["docs"]],
                    },
                ],
            },
            {
                "id": "opp-free-tier-2",
                "title": "Expand free tier for small businesses",
                "summary": SHARED_SUMMARY,
                "type": "pricing_packaging",
                "scoring": {"total": 64},
                "citations": [c["reviews"], c["jobs"]],
            },
            {
                "id": "opp-compliance",
                "title": "Automated compliance reporting",
                "type": "trust",
                "why_now": "New audit rules take effect this year",
                "customer": "Security officers",
                "scoring": {"total": 55},
                "tradeoffs": {
                    "why_competitors_wont_follow": ["Legacy vendors lack audit trails"],
                },
                "citations": [c["status"]],
            },
            {
                "id": "opp-api",
                "title": "Public API for integrations",
                "type": "platform",
                "why_now": "Buyers expect to sync data with their CRM",
                "scoring": {"total": 40},
            },
        ],
    }


@pytest.fixture
def opportunities_v2():
    """Older v2 opportunities: flat score, plain citations."""
    return {
        "meta": {"schema_version": 2, "generated_at": "2025-01-02T00:00:00Z"},
        "opportunities": [
            {
                "title": "Legacy reporting add-on",
                "score": 61,
                "why_they_cant_easily_copy": "Requires a data warehouse",
                "first_experiments": ["Interview 5 finance leads"],
                "citations": [{"url": "https://old.example/a", "source_type": "blog"}],
            },
        ],
    }


@pytest.fixture
def jtbd_content():
    return {
        "meta": {"schema_version": 2, "generated_at": "2025-03-13T09:00:00Z"},
        "jobs": [
            {"job_statement": "Share a board with a client", "opportunity_score": 45},
            {"job_statement": "Plan a sprint in under an hour", "opportunity_score": 88},
            {"job_statement": "Export a status report", "opportunity_score": 60},
        ],
    }


@pytest.fixture
def snapshots():
    c = copy.deepcopy(CITATIONS)
    return [
        {
            "competitor_name": "Acme",
            "customer_struggles": [
                "Slow performance on large boards",
                "Pricing jumps at 10 seats",
                "Hard to get support on weekends",
            ],
            "proof_points": [{"claim": "Reviews mention lag", "citations": [c["reviews"]]}],
        },
        {
            "competitor_name": "Globex",
            "customer_struggles": [
                "Pricing is opaque",
                "Slow performance on large boards",
                "Onboarding takes weeks",
            ],
        },
    ]


@pytest.fixture
def strategic_bets_content():
    return {
        "meta": {"schema_version": 2},
        "bets": [
            {
                "title": "Own the SMB self-serve motion",
                "summary": "Commit to self-serve SMB acquisition this year",
                "what_we_say_no_to": ["Custom enterprise deals", "On-prem installs"],
                "first_real_world_proof": {"description": "Three competitors raised prices"},
                "why_competitors_wont_follow": "Their sales teams are paid on seats",
            },
            {"title": "Ship a public API"},
        ],
    }


@pytest.fixture
def artifact_rows(opportunities_v3, opportunities_v2, jtbd_content, snapshots):
    """Stored artifact rows as the persistence layer returns them."""
    return [
        {"type": "opportunities_v3", "content_json": opportunities_v3,
         "created_at": "2025-03-14T10:00:00Z"},
        {"type": "opportunities_v2", "content_json": opportunities_v2,
         "created_at": "2025-01-02T00:00:00Z"},
        {"type": "jtbd", "content_json": jtbd_content,
         "created_at": "2025-03-13T09:00:00Z"},
        {"type": "profiles",
         "content_json": {"run_id": "run-3", "generated_at": "2025-03-12T00:00:00Z",
                          "snapshots": snapshots},
         "created_at": "2025-03-12T00:00:00Z"},
    ]
