"""
Receipt parser service for extracting structured data from OCR text.

Tuned for Japanese receipts: kanji and era dates, full-width digits,
keyword-anchored totals and OCR glyph confusion inside numbers.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from keihi.models.receipt import Category, ExtractionResult
from keihi.services.categorizer import CategoryClassifier
from keihi.utils.candidates import AmountCandidate, create_amount_candidate
from keihi.utils.money import (
    MAX_AMOUNT,
    find_marked_prices,
    find_price,
    find_price_after,
)
from keihi.utils.normalize import strip_whitespace, to_half_width
from keihi.utils.scoring import select_best_amount, select_max_amount

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100
REIWA_EPOCH = 2018  # 令和1年 == 2019

VENDOR_SCAN_LINES = 8
VENDOR_MAX_LENGTH = 50

# Currency-marked amounts must exceed this (excludes item counts like ¥5)
MARKED_AMOUNT_FLOOR = 10
# Bare numbers are only trusted as totals within [100, 1,000,000)
BARE_AMOUNT_FLOOR = 100
BARE_AMOUNT_CEILING = 1_000_000


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    priority: Optional[int] = None
    era_offset: int = 0  # Added to the year group (Japanese era dates)
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))

    def search(self, text: str) -> Optional[re.Match]:
        return self.compiled.search(text)


class ReceiptParser:
    """Service for parsing receipt text and extracting structured data."""

    def __init__(self, classifier: Optional[CategoryClassifier] = None):
        """Initialize parser with regex patterns."""
        self._init_patterns()
        self.classifier = classifier or CategoryClassifier()

    def _init_patterns(self):
        """Initialize regex patterns for parsing."""

        # Digit groups tolerate OCR-inserted spaces ("2 0 2 4")
        year = r'(\d[\s\d]{3})'
        part = r'(\d[\s\d]{0,2})'

        # Tried in order; only the first occurrence of each is considered
        self.date_patterns = (
            PatternSpec(
                name='kanji_ymd',
                pattern=year + r'\s*年\s*' + part + r'\s*月\s*' + part + r'\s*日?',
                example='2024年12月10日',
                notes='Day marker optional; spaces allowed around kanji',
            ),
            PatternSpec(
                name='delimited_ymd',
                pattern=year + r'[/\-.．]\s*' + part + r'[/\-.．]\s*' + part,
                example='2024/12/10',
                notes='Separators: / - . and full-width ．',
            ),
            PatternSpec(
                name='reiwa_long',
                pattern=r'令\s*和\s*' + part + r'\s*年\s*' + part + r'\s*月\s*' + part + r'\s*日?',
                example='令和6年12月10日',
                era_offset=REIWA_EPOCH,
            ),
            PatternSpec(
                name='reiwa_short',
                pattern=r'R\s*' + part + r'[./\-]\s*' + part + r'[./\-]\s*' + part,
                example='R6.12.10',
                era_offset=REIWA_EPOCH,
                flags=0,
            ),
        )

        # Total indicators, strongest first
        self.total_keywords = (
            PatternSpec(name='合計金額', pattern=r'合\s*計\s*金\s*額', example='合計金額 1,500円', priority=11),
            PatternSpec(name='合計(税込)', pattern=r'合\s*計\s*[（(]?\s*税\s*込?\s*[)）]?', example='合計(税込) ¥1,500', priority=10),
            PatternSpec(name='お支払い', pattern=r'お\s*支\s*払\s*い?\s*[額金]?', example='お支払金額 1,500', priority=9),
            PatternSpec(name='ご請求', pattern=r'ご\s*請\s*求\s*[額金]?', example='ご請求額 1,500', priority=9),
            PatternSpec(name='合計', pattern=r'合\s*計', example='合計 1,500', priority=8),
            PatternSpec(name='計:', pattern=r'計\s*[：:]', example='計: 1,500', priority=7),
            PatternSpec(name='小計', pattern=r'小\s*計', example='小計 1,000', priority=5),
            PatternSpec(name='Total', pattern=r'Total', example='Total 1,500', priority=6),
        )

        # Lines carrying these never hold the total
        self.amount_exclusions = (
            PatternSpec(name='points', pattern=r'ポ\s*イ\s*ン\s*ト', example='ポイント 2,000'),
            PatternSpec(name='points_abbrev', pattern=r'Pt', example='今回Pt 15'),
            PatternSpec(name='tendered', pattern=r'お\s*預\s*り', example='お預り 10,000'),
            PatternSpec(name='change', pattern=r'お\s*釣\s*り', example='お釣り 8,500'),
            PatternSpec(name='change_alt', pattern=r'釣\s*銭', example='釣銭 8,500'),
            PatternSpec(name='tax_subject', pattern=r'対\s*象', example='10%対象 1,364'),
            PatternSpec(name='consumption_tax', pattern=r'消\s*費\s*税', example='消費税 136', notes='税込 is not excluded'),
            PatternSpec(name='tax_included', pattern=r'内\s*税', example='内税 136'),
            PatternSpec(name='tax_excluded', pattern=r'外\s*税', example='外税 136'),
            PatternSpec(name='markdown', pattern=r'値\s*引', example='値引 -100'),
            PatternSpec(name='discount', pattern=r'割\s*引', example='割引 -100'),
            PatternSpec(name='coupon', pattern=r'クーポン', example='クーポン -50'),
            PatternSpec(name='member_number', pattern=r'会\s*員\s*番\s*号', example='会員番号 1234567'),
            PatternSpec(name='phone', pattern=r'電\s*話', example='電話 03-1234-5678'),
            PatternSpec(name='phone_abbrev', pattern=r'TEL', example='TEL 03-1234-5678'),
            PatternSpec(name='number_abbrev', pattern=r'No\.', example='No.0012'),
            PatternSpec(name='number', pattern=r'番\s*号', example='登録番号 T1234567890123'),
        )

        # Header lines that are never the store name
        self.vendor_exclusions = (
            PatternSpec(name='digits_only', pattern=r'^[0-9]+$', example='0012'),
            PatternSpec(name='date_like', pattern=r'^[0-9\-/.\s:：]+$', example='12/10 14:32'),
            PatternSpec(name='receipt', pattern=r'レシート', example='レシート'),
            PatternSpec(name='invoice', pattern=r'領\s*収', example='領収書'),
            PatternSpec(name='slip', pattern=r'伝\s*票', example='伝票番号 0012'),
            PatternSpec(name='number', pattern=r'番\s*号', example='登録番号'),
            PatternSpec(name='number_abbrev', pattern=r'No\.', example='No.0012'),
            PatternSpec(name='date_label', pattern=r'日\s*付', example='日付 2024/12/10'),
            PatternSpec(name='honorific', pattern=r'^\s*様\s*$', example='様'),
            PatternSpec(name='total', pattern=r'合\s*計', example='合計 1,500'),
            PatternSpec(name='amount', pattern=r'金\s*額', example='金額 1,500'),
            PatternSpec(name='tax', pattern=r'税', example='税込'),
        )

    def parse(self, text: str) -> ExtractionResult:
        """
        Parse receipt text and extract all available fields.

        Args:
            text: OCR-extracted text from one receipt

        Returns:
            ExtractionResult; fields no rule matched are left unset
        """
        text = text or ""

        result = ExtractionResult(
            date=self.extract_date(text),
            amount=self.extract_amount(text),
            vendor=self.extract_vendor(text),
            category=self.classify_category(text),
        )

        logger.debug("Parsed receipt", extra={
            "date": result.date,
            "amount": result.amount,
            "vendor": result.vendor,
            "category": result.category.value if result.category else None,
        })
        return result

    @staticmethod
    def _split_lines(text: str) -> List[str]:
        """Trimmed, non-empty lines."""
        return [line.strip() for line in text.split('\n') if line.strip()]

    # ------------------------------------------------------------------
    # Date
    # ------------------------------------------------------------------

    def extract_date(self, text: str) -> Optional[str]:
        """
        Extract the transaction date as YYYY-MM-DD.

        Calendar day counts are not checked, so 2024-02-30 is accepted.
        """
        normalized = to_half_width(text or "")

        for spec in self.date_patterns:
            match = spec.search(normalized)
            if not match:
                continue

            first, month, day = (int(strip_whitespace(g)) for g in match.groups())
            year = spec.era_offset + first

            if 0 < year < 100:
                year += 2000  # Two-digit year

            if 1 <= month <= 12 and 1 <= day <= 31 and MIN_YEAR <= year <= MAX_YEAR:
                value = f"{year:04d}-{month:02d}-{day:02d}"
                logger.debug("Date matched %s: %s", spec.name, value)
                return value

        return None

    # ------------------------------------------------------------------
    # Amount
    # ------------------------------------------------------------------

    def _is_excluded(self, line: str) -> bool:
        return any(spec.search(line) for spec in self.amount_exclusions)

    def extract_amount(self, text: str) -> Optional[int]:
        """
        Extract the receipt total in yen.

        Cascade, each phase only if the previous found nothing:
        1. Keyword-anchored candidates, highest keyword priority wins
        2. Largest currency-marked amount (¥1,500 / 1,500円)
        3. Largest bare number on a non-excluded line
        """
        text = text or ""
        lines = [to_half_width(line) for line in self._split_lines(text)]

        best = select_best_amount(self._collect_amount_candidates(lines))
        if best:
            logger.debug("Selected amount %d from %s (priority %d)", best.amount, best.label, best.priority)
            return best.amount

        marked = select_max_amount(find_marked_prices(to_half_width(text)), MARKED_AMOUNT_FLOOR, MAX_AMOUNT)
        if marked is not None:
            logger.debug("Fallback amount (currency marker): %d", marked)
            return marked

        bare = select_max_amount(
            (find_price(line) for line in lines if not self._is_excluded(line)),
            BARE_AMOUNT_FLOOR,
            BARE_AMOUNT_CEILING,
            low_inclusive=True,
        )
        if bare is not None:
            logger.debug("Last resort amount: %d", bare)
        return bare

    def _collect_amount_candidates(self, lines: List[str]) -> List[AmountCandidate]:
        """Scan every non-excluded line for keyword-anchored totals."""
        candidates = []

        for i, line in enumerate(lines):
            if self._is_excluded(line):
                continue

            for spec in self.total_keywords:
                if not spec.search(line):
                    continue

                amount = find_price_after(line, spec.compiled)

                if not amount:
                    amount = find_price(line)

                if not amount and i + 1 < len(lines):
                    next_line = lines[i + 1]
                    if not self._is_excluded(next_line):
                        amount = find_price(next_line)

                candidate = create_amount_candidate(amount, spec.priority, i, spec.name)
                if candidate:
                    logger.debug("Found candidate: %s = %d (priority: %d)", spec.name, amount, spec.priority)
                    candidates.append(candidate)

        return candidates

    # ------------------------------------------------------------------
    # Vendor
    # ------------------------------------------------------------------

    def extract_vendor(self, text: str) -> Optional[str]:
        """Take the first header line that is not a date, number or receipt label."""
        for line in self._split_lines(text or "")[:VENDOR_SCAN_LINES]:
            if len(line) <= 2:
                continue
            if any(spec.search(line) for spec in self.vendor_exclusions):
                continue

            vendor = line[:VENDOR_MAX_LENGTH].strip()
            logger.debug("Extracted vendor: %s", vendor)
            return vendor

        return None

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    def classify_category(self, text: str) -> Optional[Category]:
        return self.classifier.classify(text or "")


_default_parser = ReceiptParser()


def parse_receipt_text(text: str) -> ExtractionResult:
    """Extract date, amount, vendor and category using the shared parser."""
    return _default_parser.parse(text)
