"""PRD document validation and product name extraction.

The publish path only runs the structural check (non-empty, has a
"# PRD: <name>" title). validate_answers() is the stricter check of the
structured answer set a PRD is generated from; it is exposed through the
CLI and not used when publishing.
"""

import re
from pathlib import Path
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from vulcan_prd.errors import EmptyDocument, MissingTitle, ValidationError

_TITLE_RE = re.compile(r"^#\s+PRD:", re.MULTILINE)
_LEADING_COMMENT_RE = re.compile(r"\A\s*<!--.*?-->[ \t]*\n?\n?", re.DOTALL)
_PRD_HEADING_RE = re.compile(r"^#[ \t]+PRD:[ \t]*(.*)$", re.MULTILINE)
_HEADING_RE = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)

REQUIRED_ANSWER_FIELDS = (
    "product_name",
    "goal",
    "consumers",
    "grain",
    "entities",
    "primary_time",
    "dimensions",
    "measures",
    "metrics",
    "sources",
    "freshness_backfill",
)


class ValidationResult(BaseModel):
    """Outcome of validate(); errors are EmptyDocument / MissingTitle instances."""

    valid: bool
    errors: List[ValidationError] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def messages(self) -> List[str]:
        return [str(e) for e in self.errors]


class FieldError(BaseModel):
    field: str
    message: str


class AnswersValidation(BaseModel):
    ok: bool
    missing: List[str] = Field(default_factory=list)
    errors: List[FieldError] = Field(default_factory=list)


def validate(content: str) -> ValidationResult:
    """Structural check: content is not blank and has a '# PRD:' title line."""
    if not content or not content.strip():
        return ValidationResult(valid=False, errors=[EmptyDocument()])
    if not _TITLE_RE.search(content):
        return ValidationResult(valid=False, errors=[MissingTitle()])
    return ValidationResult(valid=True)


def validate_file(path: Path | str) -> ValidationResult:
    """Read a PRD file as UTF-8 and validate it.

    A read failure is reported as an invalid result rather than raised.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return ValidationResult(valid=False, errors=[ValidationError(f"Failed to read file: {e}")])
    return validate(content)


def extract_product_name(content: str) -> str | None:
    """Return the product name from the document title.

    A leading <!-- ... --> block is skipped. "# PRD: <name>" wins over a
    plain "# <name>" heading; returns None when there is no top-level heading.
    """
    body = _LEADING_COMMENT_RE.sub("", content, count=1)
    match = _PRD_HEADING_RE.search(body) or _HEADING_RE.search(body)
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, (list, tuple)) and len(value) == 0)


def validate_answers(answers: dict[str, Any]) -> AnswersValidation:
    """Check a structured PRD answer set for required fields and nested shape."""
    missing = [key for key in REQUIRED_ANSWER_FIELDS if _is_missing(answers.get(key))]
    errors: List[FieldError] = []

    entities = answers.get("entities")
    if isinstance(entities, list):
        for index, entity in enumerate(entities):
            if not isinstance(entity, dict) or not entity.get("name") or not entity.get("id"):
                errors.append(
                    FieldError(
                        field=f"entities[{index}]",
                        message=f"Entity at index {index} must have both 'name' and 'id' fields",
                    )
                )

    primary_time = answers.get("primary_time")
    if primary_time is not None and not (isinstance(primary_time, dict) and primary_time.get("field")):
        errors.append(FieldError(field="primary_time.field", message="Primary time must have a 'field' property"))

    freshness = answers.get("freshness_backfill")
    if freshness is not None and not (isinstance(freshness, dict) and freshness.get("cadence")):
        errors.append(
            FieldError(
                field="freshness_backfill.cadence",
                message="Freshness/backfill must have a 'cadence' field",
            )
        )

    return AnswersValidation(ok=not missing and not errors, missing=missing, errors=errors)
