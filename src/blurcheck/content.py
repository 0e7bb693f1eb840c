"""Page content classification from extracted text.

Cover pages, logos and short statement headers render graphics that the
edge estimator reads as blur.  This module flags such pages so the page
analyzer can judge them on text sharpness alone.
"""

from __future__ import annotations

import logging
import re

from blurcheck.config import BlurCheckConfig
from blurcheck.models import ContentClass, TextItem

logger = logging.getLogger("blurcheck.content")

_HEADER_KEYWORDS = re.compile(
    r"bill|statement|invoice|report|summary|account|period", re.IGNORECASE
)
_DATE_PATTERN = re.compile(
    r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}|\w+ \d{1,2}, \d{4}", re.IGNORECASE
)
_AMOUNT_PATTERN = re.compile(r"\$[\d,]+\.?\d*|USD|EUR|GBP", re.IGNORECASE)


def join_text(items: list[TextItem]) -> str:
    """Concatenate text items with single spaces."""
    return " ".join(item.text for item in items)


class PageContentClassifier:
    """Decide whether a page looks like a decorative header/logo page."""

    def __init__(self, config: BlurCheckConfig) -> None:
        self._config = config

    def classify(self, items: list[TextItem], page_index: int) -> ContentClass:
        """Classify a page from its text items.

        Args:
            items: Extracted text runs, in page order.
            page_index: 1-based page number. Only page 1 can be a header page.
        """
        text = join_text(items).strip()
        text_length = len(text)

        has_low_text = text_length < self._config.low_text_chars
        text_density = text_length / max(len(items), 1)

        has_keywords = _HEADER_KEYWORDS.search(text) is not None
        has_date = _DATE_PATTERN.search(text) is not None
        has_amount = _AMOUNT_PATTERN.search(text) is not None
        looks_like_statement = (
            has_keywords
            and has_date
            and has_amount
            and text_length < self._config.header_max_text_chars
        )

        is_header = page_index == 1 and (has_low_text or looks_like_statement)

        if self._config.debug:
            logger.debug(
                "blurcheck | content | page=%d | text_length=%d | density=%.1f | "
                "header=%s",
                page_index,
                text_length,
                text_density,
                is_header,
            )

        return ContentClass(
            is_likely_header_page=is_header,
            text_density=text_density,
            has_low_text_content=has_low_text,
            text_length=text_length,
            has_header_keywords=has_keywords,
            has_date_pattern=has_date,
            has_amount_pattern=has_amount,
        )
