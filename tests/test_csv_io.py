import base64
import hashlib

import pytest

from utm_builder.config import ToolConfig
from utm_builder.csv_io import build_csv_bytes, decode_csv_bytes, read_csv_rows
from utm_builder.errors import CsvFormatError

TOOL = ToolConfig(utms={"utm_source": ["Source"], "utm_medium": ["Medium"]})


def test_decode_consumes_utf8_bom_and_crlf():
    raw = "\ufeffurl,source\r\nhttp://x.com,google\r\n".encode("utf-8")

    text, delimiter, report = decode_csv_bytes(raw)

    assert text == "url,source\nhttp://x.com,google\n"
    assert delimiter == ","
    assert report["newlines"]["changed"] is True


def test_reads_latin1_semicolon_file_with_normalized_keys():
    raw = "URL;Mídia;Campanha\nhttp://x.com;Busca;Verão\n".encode("latin-1")

    table = read_csv_rows(raw)

    assert table.headers == ["URL", "Mídia", "Campanha"]
    line, row, cells = table.rows[0]
    assert line == 2
    assert row == {"url": "http://x.com", "midia": "Busca", "campanha": "Verão"}
    assert cells == ["http://x.com", "Busca", "Verão"]


def test_short_rows_are_padded_and_long_rows_dropped():
    raw = b"url,source,medium\nhttp://x.com,google\nhttp://y.com,a,b,c\n"

    table = read_csv_rows(raw)

    assert [line for line, _, _ in table.rows] == [2]
    assert table.rows[0][1] == {"url": "http://x.com", "source": "google", "medium": ""}
    assert table.warnings[0]["issue"] == "row_too_short"
    assert table.errors[0]["issue"] == "row_too_long"
    assert table.errors[0]["row"] == 3


def test_blank_lines_are_skipped():
    raw = b"\nurl,source\n\nhttp://x.com,google\n,\n"

    table = read_csv_rows(raw)

    assert table.headers == ["url", "source"]
    assert len(table.rows) == 1


def test_empty_file_is_rejected():
    with pytest.raises(CsvFormatError):
        read_csv_rows(b"  \n\n")


def test_duplicate_headers_are_rejected():
    with pytest.raises(CsvFormatError, match="duplicate"):
        read_csv_rows(b"url,Source,source\nhttp://x.com,a,b\n")


def test_build_csv_bytes_appends_utm_columns():
    raw = b"url,source,medium\nhttp://x.com,google,cpc\nhttp://y.com,facebook,\n"

    result = build_csv_bytes(raw, TOOL)

    out_bytes = base64.b64decode(result["built_csv"]["content_b64"])
    assert out_bytes.startswith(b"\xef\xbb\xbf")
    assert result["built_csv"]["sha256"] == hashlib.sha256(out_bytes).hexdigest()
    assert out_bytes.decode("utf-8-sig") == (
        "url,source,medium,utm_source,utm_medium,url ga\n"
        "http://x.com,google,cpc,google,cpc,http://x.com?utm_source=google&utm_medium=cpc\n"
        "http://y.com,facebook,,facebook,Parameters not found: Medium,"
        "Correct the parameters to generate the URL\n"
    )

    report = result["report"]
    assert report["summary"]["rows"] == 2
    assert report["summary"]["rows_with_errors"] == 1
    assert report["summary"]["parameters"] == ["utm_source", "utm_medium"]
    assert report["rows"][0]["row"] == 2
    assert report["rows"][1]["has_error"] is True


def test_latin1_cells_come_back_unchanged_in_export():
    raw = "URL;Mídia;Campanha\nhttp://x.com;Busca;Verão\n".encode("latin-1")
    tool = ToolConfig(utms={"utm_campaign": ["Campanha"]})

    result = build_csv_bytes(raw, tool)

    out_text = base64.b64decode(result["built_csv"]["content_b64"]).decode("utf-8-sig")
    assert out_text.splitlines()[1] == "http://x.com,Busca,Verão,verao,http://x.com?utm_campaign=verao"


def test_reuploaded_export_does_not_repeat_output_columns():
    raw = (
        b"url,source,utm_source,url ga\n"
        b"http://x.com,google,old,http://x.com?utm_source=old\n"
    )
    tool = ToolConfig(utms={"utm_source": ["source"]})

    result = build_csv_bytes(raw, tool)

    out_text = base64.b64decode(result["built_csv"]["content_b64"]).decode("utf-8-sig")
    assert out_text == (
        "url,source,utm_source,url ga\n"
        "http://x.com,google,google,http://x.com?utm_source=google\n"
    )
