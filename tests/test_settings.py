import pytest
from pydantic import ValidationError

from utm_builder.settings import Settings


def test_settings_load_reads_env(monkeypatch):
    monkeypatch.setenv("UTM_BUILDER_FIELD_SEPARATOR", ".")
    monkeypatch.setenv("UTM_BUILDER_MAX_UPLOAD_BYTES", "10")

    loaded = Settings.load()

    assert loaded.field_separator == "."
    assert loaded.max_upload_bytes == 10
    assert loaded.space_separator == "-"


def test_settings_defaults(monkeypatch):
    for name in ("FIELD_SEPARATOR", "SPACE_SEPARATOR", "LOG_LEVEL", "MAX_UPLOAD_BYTES"):
        monkeypatch.delenv(f"UTM_BUILDER_{name}", raising=False)

    loaded = Settings.load()

    assert loaded.field_separator == "_"
    assert loaded.log_level == "INFO"


@pytest.mark.parametrize("separator", [" ", "A"])
def test_settings_reject_bad_separator(monkeypatch, separator):
    monkeypatch.setenv("UTM_BUILDER_FIELD_SEPARATOR", separator)

    with pytest.raises(ValidationError):
        Settings.load()
