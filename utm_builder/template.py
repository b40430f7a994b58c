"""Empty CSV templates listing the columns a tool configuration reads."""

from __future__ import annotations

import csv
import io

from .config import ToolConfig
from .rules import NORMALIZED_DELIMITER, URL_COLUMN
from .strings import normalize


def template_headers(tool: ToolConfig) -> list[str]:
    return [URL_COLUMN] + [c for c in tool.columns() if normalize(c) != URL_COLUMN]


def render_template(tool: ToolConfig) -> str:
    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=NORMALIZED_DELIMITER, lineterminator="\n")
    writer.writerow(template_headers(tool))
    return outp.getvalue()
