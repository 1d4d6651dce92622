def strip_text(value: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value or None


def strip_identifier(value: str | None) -> str | None:
    # vendor ids arrive as strings or ints depending on the endpoint
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    return strip_text(value)
