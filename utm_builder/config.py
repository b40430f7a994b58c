"""
Per-tool build configuration.

A tool (Google Analytics here) maps each UTM parameter to the ordered CSV
columns whose values make it up, plus optional per-column validation patterns.
"""

from __future__ import annotations

import json
import re
from typing import Dict, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .settings import Separator, settings
from .strings import normalize, normalize_keys


class ToolConfig(BaseModel):
    utms: Dict[str, List[str]] = Field(
        ...,
        examples=[{"utm_source": ["source"], "utm_campaign": ["campaign", "date"]}],
    )
    validation_rules: Dict[str, str] = Field(default_factory=dict, examples=[{"date": r"^\d{8}$"}])
    field_separator: Separator = Field(default_factory=lambda: settings.field_separator)
    space_separator: Separator = Field(default_factory=lambda: settings.space_separator)

    @field_validator("utms")
    @classmethod
    def _check_utms(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        if not value:
            raise ValueError("at least one UTM parameter is required")
        for utm, columns in value.items():
            if not utm.strip():
                raise ValueError("UTM parameter names cannot be blank")
            if not columns:
                raise ValueError(f"{utm} must list at least one column")
            if any(not column.strip() for column in columns):
                raise ValueError(f"{utm} has a blank column name")
        return value

    @field_validator("validation_rules")
    @classmethod
    def _check_rules(cls, value: Dict[str, str]) -> Dict[str, str]:
        for column, pattern in value.items():
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern for {column}: {e}") from e
        return normalize_keys(value)

    def columns(self) -> List[str]:
        """Distinct source columns, in the order the config first names them."""
        seen = set()
        result = []
        for columns in self.utms.values():
            for column in columns:
                key = normalize(column)
                if key not in seen:
                    seen.add(key)
                    result.append(column)
        return result

    @classmethod
    def from_json(cls, text: str) -> ToolConfig:
        try:
            return cls.model_validate(json.loads(text))
        except json.JSONDecodeError as e:
            raise ConfigError(f"config is not valid JSON: {e.msg}") from e
        except ValidationError as e:
            raise ConfigError(_format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        where = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{where}: {item['msg']}" if where else item["msg"])
    return "; ".join(parts)
