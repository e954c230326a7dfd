"""CLI utilities module."""

from rmx.cli.utils.list_shared import COLUMN_CONFIG, CharacterDataTransformer, CharacterTableRow
from rmx.cli.utils.options import (
    GENDER_OPTION,
    NAME_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_OPTION,
    SPECIES_OPTION,
    STATUS_OPTION,
    URL_OPTION,
    OutputFormat,
)
from rmx.cli.utils.output import handle_csv_output, handle_json_output
from rmx.cli.utils.session import build_coordinator, build_start_query, catalog_session, setup_logging

__all__ = [
    "COLUMN_CONFIG",
    "GENDER_OPTION",
    "NAME_OPTION",
    "OUTPUT_FORMAT_OPTION",
    "OUTPUT_PATH_OPTION",
    "PAGE_OPTION",
    "SPECIES_OPTION",
    "STATUS_OPTION",
    "URL_OPTION",
    "CharacterDataTransformer",
    "CharacterTableRow",
    "OutputFormat",
    "build_coordinator",
    "build_start_query",
    "catalog_session",
    "handle_csv_output",
    "handle_json_output",
    "setup_logging",
]
