"""
Moderation decision for submitted reviews.

moderate_review() runs the full pipeline on raw text:

    raw text -> sanitize_content() -> detect_spam() -> classify_score()

and returns a ModerationResult. The disposition depends only on the score:

    score >= SPAM_BLOCK_THRESHOLD  -> BLOCK  (held for review, origin IP blocked)
    score >= SPAM_FLAG_THRESHOLD   -> FLAG   (held for review)
    otherwise                      -> ACCEPT (published immediately)

Held reviews are never rejected outright; they are stored flagged so an
admin can approve or delete them later.
"""

from dataclasses import dataclass, field

from app.config import ReviewDisposition, ReviewMessage, settings
from app.services.spam_filter import detect_spam
from app.utils.sanitize import sanitize_content


@dataclass
class ModerationResult:
    """Everything decided about one submitted review."""

    original_body: str
    sanitized_body: str
    score: int
    disposition: ReviewDisposition
    reasons: list[str] = field(default_factory=list)
    category_matches: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_flagged(self) -> bool:
        return self.disposition != ReviewDisposition.ACCEPT

    @property
    def flag_reason(self) -> str | None:
        """Reason stored on a held review, None when accepted."""
        joined = ", ".join(self.reasons)
        if self.disposition == ReviewDisposition.BLOCK:
            return f"High spam score: {joined}"
        if self.disposition == ReviewDisposition.FLAG:
            return f"Spam detected: {joined}"
        return None

    @property
    def submitter_message(self) -> str:
        return ReviewMessage.HELD if self.is_flagged else ReviewMessage.ACCEPTED


def classify_score(
    score: int,
    flag_threshold: int | None = None,
    block_threshold: int | None = None,
) -> ReviewDisposition:
    """
    Map a spam score to a disposition.

    Args:
        score: Non-negative spam score
        flag_threshold: Lowest score that is held for review (default from settings)
        block_threshold: Lowest score that also blocks the origin IP (default from settings)

    Returns:
        ReviewDisposition for the score
    """
    if flag_threshold is None:
        flag_threshold = settings.SPAM_FLAG_THRESHOLD
    if block_threshold is None:
        block_threshold = settings.SPAM_BLOCK_THRESHOLD

    if score >= block_threshold:
        return ReviewDisposition.BLOCK
    if score >= flag_threshold:
        return ReviewDisposition.FLAG
    return ReviewDisposition.ACCEPT


def moderate_review(text: str) -> ModerationResult:
    """Sanitize, score and classify raw review text."""
    sanitized = sanitize_content(text)
    check = detect_spam(sanitized)

    return ModerationResult(
        original_body=text,
        sanitized_body=sanitized,
        score=check.score,
        disposition=classify_score(check.score),
        reasons=check.reasons,
        category_matches=check.details,
    )
