import datetime
import pathlib
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, FilePath, validate_call

from ._globals import _KNOWN_OPERATION_TYPES

S3_LOGS_PARSER_BASE_FOLDER_PATH = pathlib.Path.home() / ".s3_logs_parser"


class S3LogsParserConfiguration(BaseModel):
    """
    Options controlling which raw S3 log lines count towards the statistics.

    Parameters
    ----------
    exclude_lines_matching : str, optional
        Raw lines containing this substring verbatim are dropped before parsing (e.g., health-check traffic).
        An empty string is the same as not setting it.
    date_cutoff : datetime.date, optional
        The earliest calendar day for which bandwidth, request time, and dates are accumulated.
        Downloads before this day are still counted.
    download_operation_type : str, default: "REST.GET.OBJECT"
        The operation type whose records are retained for statistics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude_lines_matching: str | None = None
    date_cutoff: datetime.date | None = None
    download_operation_type: Literal[_KNOWN_OPERATION_TYPES] = "REST.GET.OBJECT"


@validate_call
def load_configuration(configuration_file_path: FilePath) -> S3LogsParserConfiguration:
    """Load a configuration from a YAML file holding a mapping of option names to values."""
    with open(file=configuration_file_path) as stream:
        content = yaml.load(stream=stream, Loader=yaml.SafeLoader) or dict()

    if not isinstance(content, dict):
        raise ValueError(f"The configuration file '{configuration_file_path}' must contain a mapping!")

    return S3LogsParserConfiguration(**content)
