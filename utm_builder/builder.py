"""
UTM building for a single CSV row.

Each UTM parameter is composed from the row values of its configured columns,
joined by the field separator. Columns that are empty or fail their validation
pattern are reported by display name instead of raising, so one pass over a
row tells the user everything that needs fixing.

The URL is only emitted when every parameter came out clean.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .config import ToolConfig
from .rules import (
    CORRECT_PARAMETERS_SENTINEL,
    DEFAULT_FIELD_SEPARATOR,
    DEFAULT_SPACE_SEPARATOR,
    ERROR_MESSAGE_JOINER,
    MISSING_URL_SENTINEL,
    UNDEFINED_PARAMETER_MESSAGE,
    URL_COLUMN,
    URL_GA_COLUMN,
    VALIDATION_ERROR_MESSAGE,
)
from .strings import Rule, is_empty, normalize, normalize_keys, replace_whitespace, validate_string

logger = logging.getLogger(__name__)


class ParameterResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    missing: List[str] = Field(default_factory=list)
    invalid: List[str] = Field(default_factory=list)

    @property
    def has_error(self) -> bool:
        return bool(self.missing or self.invalid)

    @property
    def error_message(self) -> str:
        messages = []
        if self.missing:
            messages.append(f"{UNDEFINED_PARAMETER_MESSAGE} {', '.join(self.missing)}")
        if self.invalid:
            messages.append(f"{VALIDATION_ERROR_MESSAGE} {', '.join(self.invalid)}")
        return ERROR_MESSAGE_JOINER.join(messages)

    @property
    def display(self) -> str:
        return self.error_message if self.has_error else self.value


class BuildResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameters: Dict[str, ParameterResult]
    base_url: Optional[str] = None

    @property
    def missing_url(self) -> bool:
        return is_empty(self.base_url)

    @property
    def has_parameter_error(self) -> bool:
        return any(p.has_error for p in self.parameters.values())

    @property
    def has_error(self) -> bool:
        return self.missing_url or self.has_parameter_error

    @property
    def utms(self) -> Dict[str, str]:
        return {name: p.display for name, p in self.parameters.items()}

    @property
    def url(self) -> str:
        if self.has_parameter_error:
            return CORRECT_PARAMETERS_SENTINEL
        if self.missing_url:
            return MISSING_URL_SENTINEL
        query = "&".join(f"{name}={p.value}" for name, p in self.parameters.items())
        return f"{self.base_url.strip()}?{query}"

    @property
    def builded_fields(self) -> Dict[str, object]:
        return {"utms": self.utms, URL_GA_COLUMN: self.url}


def build_parameter(
    name: str,
    columns: Sequence[str],
    row: Mapping[str, str],
    rules: Mapping[str, Rule],
    field_separator: str = DEFAULT_FIELD_SEPARATOR,
    space_replacement: str = DEFAULT_SPACE_SEPARATOR,
) -> ParameterResult:
    """Compose one UTM parameter. `rules` must already be keyed by normalized column."""
    missing: List[str] = []
    invalid: List[str] = []
    parts: List[str] = []

    for column in columns:
        key = normalize(column)
        value = row.get(key)

        if is_empty(value):
            missing.append(column)
            continue

        rule = rules.get(key)
        if rule is not None and not validate_string(value, rule):
            invalid.append(column)
            continue

        parts.append(replace_whitespace(normalize(value), space_replacement))

    composed = field_separator.join(parts)

    return ParameterResult(name=name, value=composed, missing=missing, invalid=invalid)


def build_utms(
    row: Mapping[str, str],
    config: Mapping[str, Sequence[str]],
    rules: Optional[Mapping[str, Rule]] = None,
    field_separator: str = DEFAULT_FIELD_SEPARATOR,
    space_replacement: str = DEFAULT_SPACE_SEPARATOR,
    log: Optional[logging.Logger] = None,
) -> BuildResult:
    """
    Build every UTM parameter of `config` from one CSV row.

    `row` is keyed by normalized column name (see csv_io.read_csv_rows) and
    carries the destination under "url". Parameters come back in config order,
    which is also the order of the query string.
    """
    (log or logger).debug("building utms for row %s", dict(row))

    normalized_rules = normalize_keys(rules or {})
    parameters = {
        name: build_parameter(
            name,
            columns,
            row,
            normalized_rules,
            field_separator=field_separator,
            space_replacement=space_replacement,
        )
        for name, columns in config.items()
    }
    return BuildResult(parameters=parameters, base_url=row.get(URL_COLUMN))


def build_with_config(
    row: Mapping[str, str],
    tool: ToolConfig,
    log: Optional[logging.Logger] = None,
) -> BuildResult:
    return build_utms(
        row,
        tool.utms,
        tool.validation_rules,
        field_separator=tool.field_separator,
        space_replacement=tool.space_separator,
        log=log,
    )
