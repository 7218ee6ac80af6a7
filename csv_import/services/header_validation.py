"""Pre-submission CSV header validation.

Checks that an export plausibly matches the schema of its import source before
any request is made. The check is pure and never raises: every failure,
including undecodable input, is reported as an invalid ``ValidationOutcome``.
"""

from __future__ import annotations

from typing import Union

from csv_import.schemas.validation import ValidationOutcome
from csv_import.services.sources import ImportSource

FIELD_SEPARATOR = ";"

MISSING_ROWS_ERROR = "CSV file must have at least a header row and one data row"


def parse_header(line: str) -> list[str]:
    """Split a header line on the field separator and trim each name."""
    return [field.strip() for field in line.split(FIELD_SEPARATOR)]


def validate_csv_header(
    csv_text: Union[str, bytes],
    source: ImportSource = ImportSource.WALLET,
) -> ValidationOutcome:
    """Validate the header row of ``csv_text`` against ``source``.

    Required columns are matched exactly (case-sensitive) and in any order.
    Extra columns are allowed. When several columns are missing, the first
    one in the source's column list is reported.
    """
    try:
        if not source.available:
            return ValidationOutcome(
                valid=False, error=f"{source.info.name} import is coming soon"
            )

        if isinstance(csv_text, bytes):
            csv_text = csv_text.decode("utf-8-sig")

        lines = [line.strip() for line in csv_text.lstrip("\ufeff").strip().split("\n")]
        if len(lines) < 2:
            return ValidationOutcome(valid=False, error=MISSING_ROWS_ERROR)

        headers = set(parse_header(lines[0]))
        for required in source.required_columns:
            if required not in headers:
                return ValidationOutcome(valid=False, error=f"Missing required column: {required}")

        return ValidationOutcome(valid=True)

    except Exception as exc:
        return ValidationOutcome(valid=False, error=str(exc) or type(exc).__name__)
