"""
Fixed build rules and user-visible messages.

Anything a deployment may tune lives in settings.py instead.
"""

DEFAULT_FIELD_SEPARATOR = "_"
DEFAULT_SPACE_SEPARATOR = "-"

URL_COLUMN = "url"
URL_GA_COLUMN = "url ga"

UNDEFINED_PARAMETER_MESSAGE = "Parameters not found:"
VALIDATION_ERROR_MESSAGE = "Invalid parameters:"
ERROR_MESSAGE_JOINER = " - "

CORRECT_PARAMETERS_SENTINEL = "Correct the parameters to generate the URL"
MISSING_URL_SENTINEL = "URL not found: fill in the url column"

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM, opens cleanly in spreadsheets
NORMALIZED_DELIMITER = ","
SNIFF_DELIMITERS = [",", ";", "\t", "|"]

# Short samples often read as a central-European code page even when they were
# saved from a Western spreadsheet; cp1252/latin-1 win when they decode cleanly.
WESTERN_ENCODINGS = ["cp1252", "latin_1", "iso8859_15"]
CENTRAL_EUROPEAN_ENCODINGS = {"cp1250", "cp852", "iso8859_2", "iso8859_16", "mac_latin2"}
