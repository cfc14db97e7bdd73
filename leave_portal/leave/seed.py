"""
Seed data for the record store.

The store is volatile: on every start it is rebuilt either from the built-in
example records below or from a JSON file (``LEAVE_SEED_FILE``) holding an
array of record objects with camelCase field names.
"""

import json
import logging
from pathlib import Path
from typing import Any

from leave_portal.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SEED_FIELDS = (
    "claimCode",
    "nationalId",
    "holderName",
    "reportDate",
    "startDate",
    "endDate",
    "issuingPhysician",
    "jobTitle",
)

# Synthetic example records; not real people.
DEFAULT_SEED_RECORDS: list[dict[str, str]] = [
    {
        "claimCode": "GSL25021372778",
        "nationalId": "1000000001",
        "holderName": "Sample Holder One",
        "reportDate": "2025-02-09",
        "startDate": "2025-02-09",
        "endDate": "2025-02-24",
        "issuingPhysician": "Dr. Sample Consultant",
        "jobTitle": "Consultant",
    },
    {
        "claimCode": "GSL25021898579",
        "nationalId": "1000000001",
        "holderName": "Sample Holder One",
        "reportDate": "2025-02-25",
        "startDate": "2025-02-25",
        "endDate": "2025-03-26",
        "issuingPhysician": "Dr. Sample Specialist",
        "jobTitle": "Consultant",
    },
    {
        "claimCode": "GSL25071678945",
        "nationalId": "1000000002",
        "holderName": "Sample Holder Two",
        "reportDate": "2025-07-12",
        "startDate": "2025-07-12",
        "endDate": "2025-07-17",
        "issuingPhysician": "Dr. Sample Resident",
        "jobTitle": "Consultant",
    },
]


def load_seed_records(seed_file: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Return the raw seed records.

    Args:
        seed_file: Optional JSON file path. When empty the built-in examples
                   are used.

    Raises:
        ConfigurationError: If the file is unreadable, not a JSON array, or
                            a record is missing one of the seed fields.
    """
    if not seed_file:
        return [dict(record) for record in DEFAULT_SEED_RECORDS]

    path = Path(seed_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read seed file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(f"Seed file {path} must contain a JSON array")

    records: list[dict[str, Any]] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConfigurationError(f"Seed record #{index} is not an object")
        missing = [name for name in SEED_FIELDS if not isinstance(item.get(name), str)]
        if missing:
            raise ConfigurationError(
                f"Seed record #{index} is missing string field(s): {', '.join(missing)}"
            )
        records.append({name: item[name] for name in SEED_FIELDS})

    logger.info(f"Loaded {len(records)} seed record(s) from {path}")
    return records
