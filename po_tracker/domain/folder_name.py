"""
PO folder-name parser.

Convention: YYYY-MM-IT-NNN_Capex|Opex_Title, e.g. "2026-01-IT-045_Capex_New_Laptop".

Parsing never fails: malformed input gives a visibly incomplete record
(CAPEX / IT-UNKNOWN / Untitled) instead of blocking creation.
"""
import re
from dataclasses import dataclass


CAPEX = "CAPEX"
OPEX = "OPEX"
_MARKERS = {"capex": CAPEX, "opex": OPEX}

IT_REF_UNKNOWN = "IT-UNKNOWN"
UNTITLED = "Untitled"

_IT_REF_RE = re.compile(r"IT-\d+", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedFolderName:
    capex_opex: str
    it_ref_no: str
    title: str


def _tokens(raw: str) -> list[str]:
    return [part.strip() for part in raw.split("_") if part.strip()]


def parse_capex_opex(tokens: list[str]) -> str:
    """Last capex/opex token wins, CAPEX when neither is present."""
    result = CAPEX
    for token in tokens:
        result = _MARKERS.get(token.lower(), result)
    return result


def parse_it_ref_no(raw: str) -> str:
    match = _IT_REF_RE.search(raw)
    if not match:
        return IT_REF_UNKNOWN
    return match.group(0).upper()


def parse_title(raw: str, tokens: list[str]) -> str:
    marker = next(
        (i for i, token in enumerate(tokens) if token.lower() in _MARKERS),
        -1,
    )
    if marker >= 0 and marker + 1 < len(tokens):
        return " ".join(tokens[marker + 1:])

    if not tokens:
        return UNTITLED

    # No underscores at all: fall back to whitespace-separated words
    words = tokens if len(tokens) > 1 else tokens[0].split()
    return " ".join(words[1:]) or raw


def parse_folder_name(folder_name: str | None) -> ParsedFolderName:
    """
    Extract CAPEX/OPEX flag, IT reference and title from a folder name.

    Example:
        >>> parse_folder_name("2026-01-IT-045_Capex_New_Laptop")
        ParsedFolderName(capex_opex='CAPEX', it_ref_no='IT-045', title='New Laptop')
    """
    raw = (folder_name or "").strip()
    tokens = _tokens(raw)
    return ParsedFolderName(
        capex_opex=parse_capex_opex(tokens),
        it_ref_no=parse_it_ref_no(raw),
        title=parse_title(raw, tokens),
    )
