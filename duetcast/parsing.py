"""Value normalization shared by config loading and CLI option handling."""

from __future__ import annotations


_BOOLEAN_TOKENS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def normalize_optional_string(value: object) -> str | None:
    """Return `value` as a stripped string, or `None` when it is missing or blank."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_boolean(value: object, field_name: str) -> bool:
    """Parse a boolean from a bool or a textual token such as `yes` or `off`.

    Raises:
        ValueError: If the value is not one of the accepted tokens.
    """

    if isinstance(value, bool):
        return value
    token = normalize_optional_string(value)
    if token is not None and token.lower() in _BOOLEAN_TOKENS:
        return _BOOLEAN_TOKENS[token.lower()]
    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def parse_speed(value: object, allowed: tuple[float, ...]) -> float:
    """Parse a playback speed token (`1.5`, `1.5x`) restricted to an allowed set."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError("Playback speed must be a non-empty value.")
    token = normalized.lower().removesuffix("x")
    try:
        speed = float(token)
    except ValueError as exc:
        raise ValueError(f"Invalid playback speed `{normalized}`.") from exc
    if speed not in allowed:
        supported = ", ".join(f"{option:g}" for option in allowed)
        raise ValueError(f"Unsupported playback speed `{normalized}`; supported: {supported}.")
    return speed
