"""Normalize stored artifact rows into the best artifact per type.

Rows come from the persistence layer as ``{type, content_json, created_at}``.
Content may be wrapped in an envelope or bare; rows that fail the structural
checks are dropped rather than raised.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable

from insight.dates import parse_datetime
from insight.models import NormalizedArtifact, NormalizedResults, ResultsMeta

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _meta(content: Any) -> dict:
    if isinstance(content, dict) and isinstance(content.get("meta"), dict):
        return content["meta"]
    return {}


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _schema_version(content: Any) -> int:
    version = _meta(content).get("schema_version")
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        return 0
    if isinstance(version, float) and not math.isfinite(version):
        return 0
    return int(version)


def _list_content(key: str) -> Callable[[str, Any, Any], NormalizedArtifact | None]:
    """Build a normalizer for content shaped ``{key: [...], meta: {...}}``."""

    def normalize(artifact_type: str, content: Any, created_at: Any) -> NormalizedArtifact | None:
        if not isinstance(content, dict) or not isinstance(content.get(key), list):
            return None
        meta = _meta(content)
        return NormalizedArtifact(
            type=artifact_type,
            content=content,
            created_at=_str_or_none(created_at),
            run_id=_str_or_none(meta.get("run_id")),
            generated_at=_str_or_none(meta.get("generated_at")),
            schema_version=_schema_version(content),
        )

    return normalize


def _normalize_profiles(artifact_type: str, content: Any, created_at: Any) -> NormalizedArtifact | None:
    # Bare list of snapshots, or an envelope around one
    if isinstance(content, list):
        snapshots, envelope = content, {}
    elif isinstance(content, dict) and isinstance(content.get("snapshots"), list):
        snapshots, envelope = content["snapshots"], content
    else:
        return None

    snapshots = [s for s in snapshots if isinstance(s, dict)]
    if not snapshots:
        return None

    return NormalizedArtifact(
        type=artifact_type,
        content=snapshots,
        created_at=_str_or_none(created_at),
        run_id=_str_or_none(envelope.get("run_id")),
        generated_at=_str_or_none(envelope.get("generated_at")),
        schema_version=_schema_version(envelope),
    )


NORMALIZERS: dict[str, Callable[[str, Any, Any], NormalizedArtifact | None]] = {
    "opportunities_v3": _list_content("opportunities"),
    "opportunities_v2": _list_content("opportunities"),
    "jtbd": _list_content("jobs"),
    "strategic_bets": _list_content("bets"),
    "profiles": _normalize_profiles,
}


def normalize_artifact(row: Any) -> NormalizedArtifact | None:
    """Normalize one stored artifact row, or None when it is unusable."""
    if not isinstance(row, dict):
        return None
    artifact_type = row.get("type")
    normalizer = NORMALIZERS.get(artifact_type) if isinstance(artifact_type, str) else None
    if normalizer is None:
        return None

    content = row.get("content_json", row.get("content"))
    result = normalizer(artifact_type, content, row.get("created_at"))
    if result is None:
        logger.debug("Dropped malformed %s artifact", artifact_type)
    return result


def pick_best_artifact(artifacts: list[NormalizedArtifact]) -> NormalizedArtifact | None:
    """Highest schema_version, then newest created_at, then first in input."""
    if not artifacts:
        return None

    def key(artifact: NormalizedArtifact):
        created = parse_datetime(artifact.created_at) or _EPOCH
        return (artifact.schema_version, created)

    best = artifacts[0]
    for artifact in artifacts[1:]:
        if key(artifact) > key(best):
            best = artifact
    return best


def normalize_artifacts(rows: Any, project_id: str = "") -> NormalizedResults:
    """Pick the best usable artifact of each supported type."""
    by_type: dict[str, list[NormalizedArtifact]] = {name: [] for name in NORMALIZERS}
    for row in rows if isinstance(rows, list) else []:
        artifact = normalize_artifact(row)
        if artifact is not None:
            by_type[artifact.type].append(artifact)

    results = NormalizedResults(
        opportunities_v3=pick_best_artifact(by_type["opportunities_v3"]),
        opportunities_v2=pick_best_artifact(by_type["opportunities_v2"]),
        strategic_bets=pick_best_artifact(by_type["strategic_bets"]),
        profiles=pick_best_artifact(by_type["profiles"]),
        jtbd=pick_best_artifact(by_type["jtbd"]),
    )

    selected = results.selected()
    generated = [
        (parse_datetime(a.generated_at), a.generated_at)
        for a in selected
        if parse_datetime(a.generated_at) is not None
    ]
    last_generated_at = max(generated)[1] if generated else None

    results.meta = ResultsMeta(
        project_id=project_id,
        last_generated_at=last_generated_at,
        available_artifact_types=[a.type for a in selected],
        schema_versions_present=sorted(
            {a.schema_version for a in selected if a.schema_version}, reverse=True,
        ),
    )
    logger.info(
        "Normalized %d artifact rows for project '%s': %s",
        len(rows) if isinstance(rows, list) else 0,
        project_id,
        ", ".join(results.meta.available_artifact_types) or "none",
    )
    return results
