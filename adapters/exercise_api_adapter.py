"""Exercise catalog adapter (ExerciseDB-compatible JSON API)."""

import logging
from typing import Any, Dict, List

import httpx

from app.config import settings
from app.exceptions import UpstreamServiceError, UpstreamTimeoutError

logger = logging.getLogger("lifetrack.exercise_api")


def _normalize(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "exercise_id": item.get("exerciseId") or item.get("id"),
        "name": item.get("name"),
        "gif_url": item.get("gifUrl"),
        "target_muscles": item.get("targetMuscles") or [],
        "body_parts": item.get("bodyParts") or [],
        "equipments": item.get("equipments") or [],
        "secondary_muscles": item.get("secondaryMuscles") or [],
        "instructions": item.get("instructions") or [],
    }


def exercises_by_muscle(muscle: str, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
    """Fetch exercises targeting a muscle, e.g. "pectorals" or "quads"."""
    url = f"{settings.exercise_api_base_url.rstrip('/')}/muscles/{muscle}/exercises"
    try:
        response = httpx.get(
            url,
            params={"offset": offset, "limit": limit},
            timeout=settings.http_timeout_sec,
        )
        response.raise_for_status()
        payload = response.json()
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError("Exercise catalog timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamServiceError(f"Exercise catalog request failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamServiceError("Exercise catalog returned invalid JSON") from exc

    items = payload.get("data") if isinstance(payload, dict) else payload
    exercises = [_normalize(item) for item in items or [] if isinstance(item, dict)]
    logger.info("Exercise catalog returned %d exercises for %s", len(exercises), muscle)
    return exercises[:limit]
