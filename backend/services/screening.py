# backend/services/screening.py
"""
Image screening gate.

Each uploaded photo is sent to Hive and checked against two thresholds:
the likelihood it is AI-generated and its similarity to images already
on the internet. What happens when Hive cannot answer is decided by the
``SCREENING_ON_ERROR`` setting:

* ``fail-open``: the image is accepted unverified and a warning is logged.
* ``fail-closed``: the submission is refused with ``ScreeningUnavailable``.
"""
import logging
from dataclasses import dataclass
from pathlib import Path

from config import settings
from utils import hive_client as hive
from utils.exceptions import ScreeningRejected, ScreeningUnavailable

logger = logging.getLogger(__name__)

FAIL_OPEN = "fail-open"
FAIL_CLOSED = "fail-closed"


class ScreeningPayloadError(ValueError):
    """Hive answered with a payload that has no model output"""


@dataclass(frozen=True)
class ScreeningScores:
    ai_generated: float
    image_similarity: float


def _score(output: dict, model: str) -> float:
    # A model missing from the output counts as a zero score
    entry = output.get(model) or {}
    try:
        return float(entry.get("score") or 0)
    except (AttributeError, TypeError, ValueError):
        return 0.0


def extract_scores(payload: dict) -> ScreeningScores:
    try:
        output = payload["status"][0]["response"]["output"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ScreeningPayloadError(f"Unexpected screening payload: {e!r}") from e
    if not isinstance(output, dict):
        raise ScreeningPayloadError("Unexpected screening payload: output is not an object")
    return ScreeningScores(
        ai_generated=_score(output, "ai_generated"),
        image_similarity=_score(output, "image_similarity"),
    )


def rejection_reason(scores: ScreeningScores):
    """Return the rejection reason for these scores, or None to accept."""
    if scores.ai_generated > settings.AI_GENERATED_THRESHOLD:
        return ScreeningRejected.AI_GENERATED
    if scores.image_similarity > settings.IMAGE_SIMILARITY_THRESHOLD:
        return ScreeningRejected.PLAGIARIZED
    return None


async def screen_image(path: Path) -> None:
    """Raise ScreeningRejected when the image must not be accepted."""
    path = Path(path)
    try:
        payload = await hive.hive_client.analyze_image(path)
        scores = extract_scores(payload)
    except Exception as e:
        # Any collaborator failure, transport or payload, falls under the policy
        if settings.SCREENING_ON_ERROR == FAIL_CLOSED:
            logger.error(f"Screening failed for {path.name}, rejecting (fail-closed): {e}")
            raise ScreeningUnavailable() from e
        logger.warning(f"Screening failed for {path.name}, accepting unverified (fail-open): {e}")
        return

    logger.info(
        f"Screening scores for {path.name}: ai_generated={scores.ai_generated} "
        f"similarity={scores.image_similarity}"
    )
    reason = rejection_reason(scores)
    if reason:
        raise ScreeningRejected(reason, filename=path.name)
