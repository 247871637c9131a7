from datetime import datetime, timezone
from typing import Union


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 date or datetime into a naive UTC datetime.

    police.uk reports e.g. "2024-02-01T00:00:00+00:00"; older responses and our
    own checkpoints use plain "2024-02-01" / "2024-02-01T00:00:00".

    Raises:
        ValueError: If the value is not a recognisable timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f'Not a timestamp: {value!r}')

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat()
