def normalize_required_text(value: str | None, field_name: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} cannot be empty')
    return normalized


def normalize_optional_text(value: str | None) -> str | None:
    """Strip a nullable text field; blank input clears it."""
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None
