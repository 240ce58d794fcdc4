"""Frame registry: alternate analytical views over the same results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from insight.models import FrameGroup, NormalizedResults

# name -> (selector, attribute of NormalizedResults holding its input artifact)
FRAMES: dict[str, tuple[Callable[..., list[FrameGroup]], str]] = {}


def register_frame(name: str, artifact: str):
    """Decorator to register a frame selector fed by one artifact."""

    def decorator(fn):
        FRAMES[name] = (fn, artifact)
        return fn

    return decorator


def select_frame(
    name: str, normalized: NormalizedResults, config: dict | None = None,
) -> list[FrameGroup]:
    """Run a registered frame selector against the matching artifact."""
    if name not in FRAMES:
        raise KeyError(f"Unknown frame '{name}' (available: {', '.join(FRAMES)})")
    selector, artifact_attr = FRAMES[name]
    artifact = getattr(normalized, artifact_attr)
    content = artifact.content if artifact is not None else None
    return selector(content, config=config)


from insight.synthesize.frames import (  # noqa: E402, F401
    select_by_customer_struggles,
    select_by_differentiation_themes,
    select_by_jobs,
    select_by_strategic_bets,
)
