"""
Heuristic spam scoring for review text.

Text is checked against a fixed, ordered list of pattern categories. Each
category has a weight; every match adds that weight to the score. A few fixed
penalties for length and capitalization are applied afterwards.

Categories are evaluated in declaration order so the reasons list is identical
for identical input.
"""

import re
from dataclasses import dataclass, field

from app.config import SpamPenalty

_FLAGS = re.ASCII | re.IGNORECASE

# Well known TLDs that still count as a link
_COMMON_TLDS = (
    "com|org|net|edu|gov|mil|info|biz|io|co|us|uk|ca|au|de|fr|jp|cn|ru|br|in|mx|es|it|nl"
    "|se|no|fi|dk|pl|cz|hu|ro|bg|gr|pt|ie|at|ch|be|lu"
)

# Uncommon suffixes favoured by throwaway spam domains
_OBSCURE_SUFFIXES = (
    "xyz|fit|top|site|online|tech|store|shop|app|dev|web|cloud|space|website|club|fun|game"
    "|live|stream|video|photo|pic|img|art|design|studio|agency|company|business|services"
    "|solutions|systems|network|software|mobile|phone|tablet|computer|laptop|desktop"
    "|server|host|domain|page|blog|news|media|content|social|chat|message|mail|email"
    "|contact|info|data|file|download|upload|share|link|url|net|digital|virtual|cyber"
    "|secure|safe|protect|guard|shield|defense|security|privacy|anonymous|proxy|vpn|tor"
    "|dark|deep|hidden|secret|private|exclusive|vip|premium|pro|plus|gold|silver|platinum"
    "|diamond|elite|luxury|fancy|cool|awesome|amazing|incredible|fantastic|perfect|best"
    "|quality|professional|expert|certified|licensed|insured|affordable|reliable|trusted"
    "|approved|verified"
)

_OBSCURE_WEBSITE = rf"\b[a-zA-Z0-9-]{{2,20}}\.({_OBSCURE_SUFFIXES})\b"


@dataclass(frozen=True)
class PatternCategory:
    """A named group of patterns sharing one weight per match."""

    name: str
    weight: int
    patterns: tuple[re.Pattern[str], ...]

    def find_matches(self, content: str) -> list[str]:
        """Return every matched substring, pattern by pattern, in text order."""
        matches: list[str] = []
        for pattern in self.patterns:
            matches.extend(m.group(0) for m in pattern.finditer(content))
        return matches


def _compile(*sources: str, flags: int = _FLAGS) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, flags) for source in sources)


SPAM_CATEGORIES: tuple[PatternCategory, ...] = (
    PatternCategory(
        name="urls",
        weight=3,
        patterns=_compile(
            r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)",
            r"www\.[a-zA-Z0-9-]+\.[a-zA-Z]{2,}",
            r"[a-zA-Z0-9-]+\.[a-zA-Z]{2,}/[^\s]*",
            r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
            rf"\b[a-zA-Z0-9.-]+\.({_COMMON_TLDS})\b",
            _OBSCURE_WEBSITE,
            r"\b[a-zA-Z0-9-]{2,20}\.[a-zA-Z]{2,6}\b",
        ),
    ),
    PatternCategory(
        name="promotional",
        weight=2,
        patterns=_compile(
            r"\b(buy|sell|offer|deal|discount|cheap|price|cost|free|trial|sample|promo|coupon"
            r"|voucher|sale|clearance|bargain|save|special|limited|exclusive|guarantee|warranty"
            r"|refund|money\.?back)\b",
            r"\b(click|visit|check|shop|order|purchase|download|subscribe|register|sign\.?up"
            r"|join|follow|like|share|comment|contact|call|text|whatsapp|telegram|discord|skype)\b",
            r"\b(awesome|amazing|incredible|fantastic|perfect|best|top|quality|professional"
            r"|expert|certified|licensed|insured|affordable|reliable|trusted|approved|verified)\b",
            r"\b(urgent|immediate|instant|quick|fast|easy|simple|hassle\.?free|risk\.?free|100%"
            r"|satisfaction|guaranteed|proven|effective|powerful|revolutionary|breakthrough)\b",
        ),
    ),
    PatternCategory(
        name="contact",
        weight=4,
        patterns=(
            *_compile(
                r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b",
                r"\b\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b",
                flags=re.ASCII,
            ),
            *_compile(
                r"\b(whatsapp|telegram|signal|viber|wechat|line|kik|snapchat|instagram|facebook"
                r"|twitter|youtube|tiktok|linkedin|pinterest|reddit)\b",
            ),
        ),
    ),
    PatternCategory(
        name="repetitive",
        weight=1,
        patterns=(
            *_compile(r"(.)\1{4,}", flags=re.ASCII),
            *_compile(r"\b(\w+)(\s+\1){2,}"),
            *_compile(r"[!@#$%^&*]{3,}", flags=re.ASCII),
        ),
    ),
    PatternCategory(
        name="suspicious",
        weight=5,
        patterns=_compile(
            r"\b(hello|hi|dear|friend|sir|madam|attention|notice|important|congratulations"
            r"|winner|lottery|prize|reward|bonus|gift|claim|collect|receive)\b.*"
            r"\b(money|cash|dollar|euro|pound|currency|payment|transfer|deposit|investment"
            r"|profit|income|earn|make|get)\b",
            r"\b(viagra|cialis|levitra|pharmacy|medication|drug|pill|weight\.?loss|diet"
            r"|fat\.?burn|muscle|fitness|bodybuilding|supplement|vitamin|herbal|natural|organic)\b",
        ),
    ),
    PatternCategory(
        name="obscureWebsites",
        weight=8,
        patterns=_compile(_OBSCURE_WEBSITE),
    ),
)

_UPPERCASE = re.compile(r"[A-Z]")


@dataclass
class SpamCheck:
    """Outcome of scoring one piece of text."""

    score: int = 0
    reasons: list[str] = field(default_factory=list)
    details: dict[str, list[str]] = field(default_factory=dict)


def uppercase_ratio(content: str) -> float:
    """Share of ASCII capitals in the text (0.0 for empty text)."""
    if not content:
        return 0.0
    return len(_UPPERCASE.findall(content)) / len(content)


def detect_spam(content: str) -> SpamCheck:
    """
    Score text against every spam category and the fixed penalties.

    Args:
        content: Sanitized review text

    Returns:
        SpamCheck with the total score, the ordered reasons and the matched
        substrings per category
    """
    check = SpamCheck()

    for category in SPAM_CATEGORIES:
        matches = category.find_matches(content)
        if not matches:
            continue
        check.details[category.name] = matches
        check.reasons.append(f"{category.name}: {len(matches)} matches")
        check.score += category.weight * len(matches)

    if len(content) < SpamPenalty.MIN_LENGTH:
        check.reasons.append("Content too short")
        check.score += SpamPenalty.SHORT_CONTENT

    if len(content) > SpamPenalty.MAX_LENGTH:
        check.reasons.append("Content too long")
        check.score += SpamPenalty.LONG_CONTENT

    if uppercase_ratio(content) > SpamPenalty.CAPS_RATIO:
        check.reasons.append("Excessive capitalization")
        check.score += SpamPenalty.EXCESSIVE_CAPS

    return check
