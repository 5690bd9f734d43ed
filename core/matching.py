"""
Layered fuzzy matching of free-text account and category labels.

Account resolution: exact name -> substring on stripped name -> 4-digit
fallback from the SMS text. Category resolution: exact name -> normalized
substring; failure resolves to None.

When several catalog entries satisfy a substring stage, the one with the
highest Levenshtein similarity to the label wins (ties keep catalog order).
"""
import re
from typing import List, Optional, Sequence

import Levenshtein

from core.exceptions import MatchError
from core.logger import setup_logger
from core.schema import Account, Category

logger = setup_logger(__name__)

FOUR_DIGIT_RUN = re.compile(r"(?<!\d)\d{4}(?!\d)")
ACCOUNT_STRIP_PATTERN = re.compile(r"[\W_]+")
CATEGORY_STRIP_PATTERN = re.compile(r"[^\w\s]|_")


def strip_account_name(name: str) -> str:
    """Lowercase and drop punctuation and whitespace (e.g. 'HSBC ****0001' -> 'hsbc0001')."""
    return ACCOUNT_STRIP_PATTERN.sub("", name.lower())


def normalize_category_name(name: str) -> str:
    """Lowercase and drop everything except letters, digits and spaces."""
    return CATEGORY_STRIP_PATTERN.sub("", name.lower())


def extract_four_digit_runs(text: Optional[str]) -> List[str]:
    """
    Extract every run of exactly four digits, in order of appearance.

    Args:
        text: Raw SMS text

    Returns:
        List of 4-digit strings
    """
    if not text:
        return []
    return FOUR_DIGIT_RUN.findall(text)


def _closest(label: str, candidates: Sequence, key) -> Optional[object]:
    """Pick the candidate whose normalized name is most similar to the label."""
    if not candidates:
        return None
    return max(candidates, key=lambda c: Levenshtein.ratio(label, key(c)))


def match_account(
    label: Optional[str],
    sms: str,
    accounts: Sequence[Account]
) -> Account:
    """
    Resolve an account label against the catalog.

    Args:
        label: Account label from model output (may be None)
        sms: Raw SMS text, used for the digit fallback
        accounts: Active catalog accounts

    Returns:
        Matched Account

    Raises:
        MatchError: If no stage produces a match
    """
    label_lower = label.lower() if label else ""
    # Labels with no letters or digits (e.g. "****") fall through to the digit stage
    if not strip_account_name(label_lower):
        label_lower = ""

    # 1. Exact, case-insensitive
    if label_lower:
        for account in accounts:
            if account.name.lower() == label_lower:
                logger.debug(f"Account '{label}' matched exactly: {account.name}")
                return account

    # 2. Substring either direction
    if label_lower:
        candidates = []
        for account in accounts:
            name_lower = account.name.lower()
            name_stripped = strip_account_name(account.name)
            if label_lower in name_lower:
                candidates.append(account)
            elif name_stripped and (label_lower in name_stripped or name_stripped in label_lower):
                candidates.append(account)

        best = _closest(label_lower, candidates, key=lambda a: a.name.lower())
        if best is not None:
            logger.debug(
                f"Account '{label}' matched by substring: {best.name} "
                f"({len(candidates)} candidate(s))"
            )
            return best

    # 3. Digit fallback on the SMS text
    for digits in extract_four_digit_runs(sms):
        for account in accounts:
            if digits in account.name:
                logger.debug(f"Account matched by digits {digits}: {account.name}")
                return account

    known = [a.name for a in accounts]
    raise MatchError(
        f"Could not match account \"{label}\". Available: {', '.join(known)}",
        details={"label": label, "candidates": known}
    )


def match_category(
    label: Optional[str],
    categories: Sequence[Category]
) -> Optional[Category]:
    """
    Resolve a category label against the catalog.

    Args:
        label: Category label from model output (may be None)
        categories: Visible catalog categories

    Returns:
        Matched Category or None
    """
    if not label:
        return None

    label_lower = label.lower()
    for category in categories:
        if category.name and category.name.lower() == label_lower:
            return category

    search = normalize_category_name(label).strip()
    if not search:
        return None

    candidates = []
    for category in categories:
        if not category.name:
            continue
        name = normalize_category_name(category.name).strip()
        if name and (search in name or name in search):
            candidates.append(category)

    best = _closest(search, candidates, key=lambda c: normalize_category_name(c.name).strip())
    if best is None:
        logger.debug(f"Category '{label}' did not match any catalog entry")
    return best
