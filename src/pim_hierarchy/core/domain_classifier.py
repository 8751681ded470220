# core/domain_classifier.py

"""
Keyword-scored guess of the product domain.

The result only nudges later heuristics (e.g. apparel size/colour columns
are treated as variant attributes); it never gates behaviour on its own.
"""

from __future__ import annotations
from typing import Any, List, Optional, Sequence

from .keywords import DEFAULT_KEYWORDS, KeywordRules
from .models import ProductDomain
from .text_utils import is_blank
from .trace import Trace, record


SAMPLE_ROWS = 20
MIN_DOMAIN_SCORE = 2
MAX_INDICATORS = 5


def detect_product_domain(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    keywords: KeywordRules = DEFAULT_KEYWORDS,
    trace: Optional[Trace] = None,
) -> ProductDomain:
    """
    Score each domain by keyword hits over the headers and the first 20 rows.

    A domain wins only with more than two hits; otherwise the table is
    "General". Confidence is min(score / 5, 0.95), or 0.3 without any hit.
    """
    header_text = " ".join(str(h) for h in headers).lower()
    sample_text = " ".join(
        str(v).lower() for row in rows[:SAMPLE_ROWS] for v in row if not is_blank(v)
    )
    all_text = f"{header_text} {sample_text}"

    scored = []
    for domain, kws in keywords.domain_keywords:
        found: List[str] = [kw for kw in kws if kw in all_text]
        scored.append((domain, len(found), found))

    # Stable: ties keep declaration order
    scored.sort(key=lambda item: -item[1])
    winner, score, found = scored[0] if scored else ("General", 0, [])

    confidence = min(score / 5, 0.95) if score > 0 else 0.3
    domain_type = winner if score > MIN_DOMAIN_SCORE else "General"

    record(trace, "domain", f"Detected domain {domain_type}", score=score, indicators=found[:MAX_INDICATORS])
    return ProductDomain(
        type=domain_type,
        confidence=round(confidence, 4),
        indicators=tuple(found[:MAX_INDICATORS]),
    )
