"""Process settings, read from UTM_BUILDER_* environment variables."""

from __future__ import annotations

import os
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from .rules import DEFAULT_FIELD_SEPARATOR, DEFAULT_SPACE_SEPARATOR
from .strings import check_separator

ENV_PREFIX = "UTM_BUILDER_"

Separator = Annotated[str, Field(min_length=1, max_length=1), AfterValidator(check_separator)]


class Settings(BaseModel):
    field_separator: Separator = DEFAULT_FIELD_SEPARATOR
    space_separator: Separator = DEFAULT_SPACE_SEPARATOR
    log_level: str = "INFO"
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    @classmethod
    def load(cls) -> Settings:
        """Build settings from the environment, falling back to defaults."""
        data = {}
        for name in cls.model_fields:
            value = os.getenv(ENV_PREFIX + name.upper())
            if value is not None:
                data[name] = value
        return cls(**data)


settings = Settings.load()
