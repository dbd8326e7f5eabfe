"""Case files: Markdown with YAML frontmatter, one case per file."""

import logging
from pathlib import Path

import frontmatter
import yaml

from courtroom.models import CaseData

logger = logging.getLogger(__name__)


def scan_cases(cases_dir: Path) -> list[Path]:
    """Return all .md files in cases_dir, sorted by name. Missing dir → []."""
    if not cases_dir.is_dir():
        logger.warning("Cases directory not found: %s", cases_dir)
        return []
    return sorted(cases_dir.glob("*.md"))


def parse_case(file_path: Path) -> CaseData:
    """Parse a case file.

    Frontmatter keys: title, charge, defendant, victim (all optional).
    The body is the case summary. A missing title falls back to the file stem.

    Raises:
        ValueError: If the file has no summary text.
        yaml.YAMLError: If the frontmatter is not valid YAML.
    """
    post = frontmatter.load(str(file_path))
    summary = post.content.strip()
    if not summary:
        raise ValueError(f"Case file has no summary: {file_path}")
    meta = post.metadata
    return CaseData(
        title=str(meta.get("title") or file_path.stem),
        charge=str(meta.get("charge", "")),
        summary=summary,
        defendant=str(meta.get("defendant", "")),
        victim=str(meta.get("victim", "")),
        source=str(file_path),
    )


def load_cases(cases_dir: Path) -> list[CaseData]:
    """Parse every case in cases_dir, skipping files that fail to parse."""
    cases: list[CaseData] = []
    for path in scan_cases(cases_dir):
        try:
            cases.append(parse_case(path))
        except (ValueError, yaml.YAMLError) as exc:
            logger.warning("Skipping case %s: %s", path.name, exc)
    return cases
