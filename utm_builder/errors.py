class UtmBuilderError(Exception):
    """Base error for input the builder cannot work with at all."""


class ConfigError(UtmBuilderError, ValueError):
    """Tool configuration is malformed."""


class CsvFormatError(UtmBuilderError, ValueError):
    """Uploaded CSV cannot be read as a table with a header row."""
