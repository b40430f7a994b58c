from fastapi import FastAPI, File, Form, HTTPException, Response, UploadFile

from .builder import build_with_config
from .config import ToolConfig
from .csv_io import build_csv_bytes
from .errors import UtmBuilderError
from .log import setup_logging
from .models import BuildResponse, BuildRowRequest, HealthResponse, RowResult
from .rules import URL_GA_COLUMN
from .settings import settings
from .strings import normalize_keys
from .template import render_template

logger = setup_logging(settings.log_level)

app = FastAPI(
    title="utm-builder",
    description="Builds validated Google Analytics UTM links from CSV rows",
    version="0.1.0",
)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/build", response_model=BuildResponse)
async def build_csv(file: UploadFile = File(...), config: str = Form(...)):
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read(settings.max_upload_bytes + 1)
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="CSV file is too large")

    try:
        tool = ToolConfig.from_json(config)
        return build_csv_bytes(raw, tool, log=logger)
    except UtmBuilderError as e:
        logger.warning("rejected %s: %s", file.filename, e)
        raise HTTPException(status_code=422, detail=str(e)) from e


@app.post("/build/row", response_model=RowResult)
def build_row(request: BuildRowRequest):
    built = build_with_config(normalize_keys(request.row), request.config, log=logger)
    fields = built.builded_fields
    return {
        "utms": fields["utms"],
        URL_GA_COLUMN: fields[URL_GA_COLUMN],
        "has_error": built.has_error,
    }


@app.post("/template")
def template(tool: ToolConfig):
    return Response(
        content=render_template(tool),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="template.csv"'},
    )


@app.post("/config", response_model=ToolConfig)
def validate_config(tool: ToolConfig):
    """Validate a tool config and echo it back with rule keys normalized."""
    return tool
