"""
Breakdown Parser
================
Extracts failure counts from Orange Factor bot comments.

A bot comment looks like:

    22 failures in 3210 pushes (0.007 failures/push) were associated with this bug ...

    ## Repository breakdown:
    * autoland: 12
    * mozilla-central: 10

    ## Table
    |    |**opt**|**debug**|
    |---|:-:|:-:|
    |**linux1804-64-qr**|5|7|
    * linux1804-64-qr
    * windows11-64-2009

Pipeline:
    1. Locate the section (SectionExtractor) → repository block + platform block
    2. Sum every ":<digits>" in the repository block
    3. Clean the repository block into breakdown lines
    4. Keep platform block lines that name an OS and are not table rows

Contract:
    - DETERMINISTIC: same text → same ExtractionResult.
    - No I/O, never raises on malformed text; absence of a section → None.
"""
import re
import logging
from typing import Dict, List, Optional, Protocol

from bugtriage.core.constants import (
    BULLET,
    PLATFORM_KEYWORDS,
    REPOSITORY_MARKER,
    SECTION_PREFIX,
    TABLE_CELL_SEPARATOR,
    TABLE_MARKER,
)
from bugtriage.models.result import ExtractionResult

logger = logging.getLogger(__name__)

REPOSITORY_KEY = "repository"
PLATFORM_KEY = "platform"

# Repository block is everything between the two markers; the platform block
# runs from "## Table" to the next "## " heading or end of text.
_BLOCK_RE = re.compile(
    re.escape(REPOSITORY_MARKER)
    + r"(.*?)"
    + re.escape(TABLE_MARKER)
    + r"(.*?)(?=^" + re.escape(SECTION_PREFIX) + r"|\Z)",
    re.DOTALL | re.MULTILINE,
)

# "autoland: 12" → 12
_COUNT_RE = re.compile(r":\s*(\d+)")


# ---------------------------------------------------------------------------
# Section Extractors
# ---------------------------------------------------------------------------
class SectionExtractor(Protocol):
    """Raw comment text → {"repository": ..., "platform": ...} or None."""

    def extract(self, text: str) -> Optional[Dict[str, str]]:
        ...


class RegexSectionExtractor:
    """Lazy multi-line match between the repository and table markers."""

    def extract(self, text: str) -> Optional[Dict[str, str]]:
        match = _BLOCK_RE.search(text or "")
        if not match:
            return None
        return {REPOSITORY_KEY: match.group(1), PLATFORM_KEY: match.group(2)}


class HeadingSectionExtractor:
    """
    Line tokenizer: recognises section headers by exact prefix and
    accumulates the lines underneath them.

    Unlike the regex, a header only counts when it starts a line, so a
    marker quoted mid-sentence cannot open a section.
    """

    def extract(self, text: str) -> Optional[Dict[str, str]]:
        repository: List[str] = []
        platform: List[str] = []
        current: Optional[List[str]] = None
        seen_repository = False
        seen_table = False

        for line in (text or "").splitlines():
            stripped = line.strip()
            if not seen_repository and stripped.startswith(REPOSITORY_MARKER):
                seen_repository = True
                current = repository
                remainder = stripped[len(REPOSITORY_MARKER):]
                if remainder:
                    repository.append(remainder)
                continue
            if seen_repository and not seen_table and stripped.startswith(TABLE_MARKER):
                seen_table = True
                current = platform
                remainder = stripped[len(TABLE_MARKER):]
                if remainder:
                    platform.append(remainder)
                continue
            if seen_table and stripped.startswith(SECTION_PREFIX):
                break
            if current is not None:
                current.append(line)

        if not (seen_repository and seen_table):
            return None
        return {REPOSITORY_KEY: "\n".join(repository), PLATFORM_KEY: "\n".join(platform)}


DEFAULT_EXTRACTOR: SectionExtractor = RegexSectionExtractor()


# ---------------------------------------------------------------------------
# Line Classifiers
# ---------------------------------------------------------------------------
def _clean_line(line: str) -> str:
    """Trim whitespace and one leading markdown bullet."""
    clean = line.strip()
    if clean.startswith(BULLET):
        clean = clean[len(BULLET):].strip()
    return clean


def breakdown_from(repo_block: str) -> List[str]:
    """Non-empty, bullet-stripped lines of the repository block, in order."""
    lines = []
    for line in repo_block.split("\n"):
        clean = _clean_line(line)
        if clean:
            lines.append(clean)
    return lines


def _is_platform_line(line: str) -> bool:
    if TABLE_CELL_SEPARATOR in line:
        return False
    return any(keyword in line for keyword in PLATFORM_KEYWORDS)


def platforms_from(platform_block: str) -> List[str]:
    """Platform labels: lines naming an OS that are not markdown table rows."""
    plats = []
    for line in platform_block.split("\n"):
        clean = _clean_line(line)
        if clean and _is_platform_line(clean):
            plats.append(clean)
    return plats


def sum_failures(repo_block: str) -> int:
    return sum(int(m.group(1)) for m in _COUNT_RE.finditer(repo_block))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def find_sections(
    text: str,
    extractor: Optional[SectionExtractor] = None,
) -> Optional[Dict[str, str]]:
    extractor = extractor or DEFAULT_EXTRACTOR
    return extractor.extract(text)


def parse_breakdown(
    text: str,
    extractor: Optional[SectionExtractor] = None,
) -> Optional[ExtractionResult]:
    """
    Parse one comment body into an ExtractionResult.

    Parameters
    ----------
    text : str
        Raw comment body.
    extractor : SectionExtractor | None
        Section locator; RegexSectionExtractor when omitted.

    Returns
    -------
    ExtractionResult | None
        None when the comment has no breakdown section.
    """
    sections = find_sections(text, extractor)
    if sections is None:
        return None

    repo_block = sections[REPOSITORY_KEY]
    return ExtractionResult(
        total=sum_failures(repo_block),
        breakdown=breakdown_from(repo_block),
        platforms=platforms_from(sections[PLATFORM_KEY]),
    )
