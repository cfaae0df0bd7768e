"""Stored render configuration and query-parameter overrides.

A record's ``custom_config`` column holds a JSON ``RenderConfig``. Each
request may override any of its fields through query parameters; the
effective configuration is the stored one with every non-empty, valid
override applied. Invalid overrides are ignored, never rejected.
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from rendering.errors import RenderError
from schemas import RENDER_CONFIG_FIELDS, RenderConfig, parse_font_size, parse_style


def parse_stored_config(raw: str | None) -> RenderConfig:
    """Parse a stored ``custom_config`` value.

    Empty or missing means all defaults.

    Raises:
        RenderError: If the stored value is not a JSON object of the
            expected shape
    """
    if raw is None or not raw.strip():
        return RenderConfig()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RenderError(f"Malformed custom_config JSON: {e}") from e
    if not isinstance(data, dict):
        raise RenderError("custom_config must be a JSON object")
    try:
        return RenderConfig.model_validate(data)
    except PydanticValidationError as e:
        raise RenderError(f"Invalid custom_config: {e}") from e


def serialize_config(config: RenderConfig | None) -> str | None:
    """JSON for the ``custom_config`` column; None when nothing is set."""
    if config is None:
        return None
    data = config.model_dump(exclude_none=True)
    return json.dumps(data, sort_keys=True) if data else None


def extract_overrides(query_params: Mapping[str, str]) -> dict[str, Any]:
    """Return the valid, non-empty visual overrides in ``query_params``.

    ``format``, ``outlook`` and ``no_cache`` are not overrides. An
    out-of-range ``font_size`` or unknown ``style`` is dropped.
    """
    overrides: dict[str, Any] = {}
    for name in RENDER_CONFIG_FIELDS:
        value = query_params.get(name)
        if value is None or value == "":
            continue
        if name == "font_size":
            size = parse_font_size(value)
            if size is not None:
                overrides[name] = size
        elif name == "style":
            style = parse_style(value)
            if style is not None:
                overrides[name] = style
        else:
            overrides[name] = value
    return overrides


def has_overrides(query_params: Mapping[str, str]) -> bool:
    return bool(extract_overrides(query_params))


def merge_overrides(
    config: RenderConfig, query_params: Mapping[str, str]
) -> RenderConfig:
    """Effective configuration for one render. Idempotent."""
    overrides = extract_overrides(query_params)
    if not overrides:
        return config
    return config.model_copy(update=overrides)
