"""
Text normalization for Japanese receipt OCR output.

OCR engines fed CJK receipts commonly return:
- Full-width digits: ２０２４ → 2024
- Confusable glyphs inside numbers: l,5OO → 1,500
- Digits split by stray spaces: 1 , 5 0 0 → 1,500
"""

import re

FULLWIDTH_DIGIT_OFFSET = 0xFEE0  # ord('０') - ord('0')

_FULLWIDTH_DIGITS = re.compile(r'[０-９]')

# (confusable glyphs, digit) - half-width and full-width forms
OCR_CONFUSIONS = (
    ('OＯ', '0'),
    ('lIｌＩ', '1'),
    ('SＳ', '5'),
    ('BＢ', '8'),
)

_CONFUSION_TABLE = str.maketrans({
    glyph: digit
    for glyphs, digit in OCR_CONFUSIONS
    for glyph in glyphs
})

# Runs of digits, commas and confusable glyphs; corrected only if they hold a digit or comma
_NUMERIC_TOKEN = re.compile(r'[0-9,' + ''.join(g for g, _ in OCR_CONFUSIONS) + r']+')
_NUMERIC_HINT = re.compile(r'[0-9,]')

_SPLIT_COMMA_BEFORE = re.compile(r'(\d)\s+,\s+')
_SPLIT_COMMA_AFTER = re.compile(r',\s+(\d)')
_SPLIT_DIGITS = re.compile(r'(?<=\d)\s+(?=\d)')
_WHITESPACE = re.compile(r'\s')


def to_half_width(text: str) -> str:
    """
    Convert full-width digits (U+FF10-U+FF19) to ASCII digits.

    Idempotent: ASCII digits are left untouched.

    Examples:
        >>> to_half_width("２０２４年１２月")
        '2024年12月'
    """
    if not text:
        return ""
    return _FULLWIDTH_DIGITS.sub(lambda m: chr(ord(m.group(0)) - FULLWIDTH_DIGIT_OFFSET), text)


def correct_ocr_confusions(text: str, numbers_only: bool = True) -> str:
    """
    Replace letters OCR commonly reads in place of digits (O→0, l/I→1, S→5, B→8).

    By default only number-like tokens are touched, so words such as "Total"
    keep their letters. With ``numbers_only=False`` every confusable glyph is
    replaced, for text known to hold a price (e.g. what follows 合計).

    Examples:
        >>> correct_ocr_confusions("合計 l,5OO円")
        '合計 1,500円'
        >>> correct_ocr_confusions(" lOOO円", numbers_only=False)
        ' 1000円'
    """
    if not numbers_only:
        return text.translate(_CONFUSION_TABLE)

    def _fix(match):
        token = match.group(0)
        if _NUMERIC_HINT.search(token):
            return token.translate(_CONFUSION_TABLE)
        return token

    return _NUMERIC_TOKEN.sub(_fix, text)


def join_split_digits(text: str) -> str:
    """
    Join digit runs split by OCR whitespace.

    Examples:
        >>> join_split_digits("1 , 5 0 0")
        '1,500'
    """
    text = _SPLIT_COMMA_BEFORE.sub(r'\1,', text)
    text = _SPLIT_COMMA_AFTER.sub(r',\1', text)
    return _SPLIT_DIGITS.sub('', text)


def strip_whitespace(group: str) -> str:
    """Remove all whitespace from a matched digit group ("2 0 2 4" → "2024")."""
    return _WHITESPACE.sub('', group)
