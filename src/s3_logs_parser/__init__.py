"""
S3 logs parser
==============

Extraction of per-object usage statistics from raw S3 server access logs.

Raw logs are read either from a local folder or directly from the bucket they are delivered to. Each line is parsed,
filtered by an optional exclusion substring, and the download requests are folded into a table keyed by object key:

- the number of downloads,
- the total number of bytes sent,
- the total request time in minutes,
- the distinct days on which the object was downloaded.

An optional date cutoff restricts everything but the download count to requests on or after a given day.
"""

from ._config import S3_LOGS_PARSER_BASE_FOLDER_PATH, S3LogsParserConfiguration, load_configuration
from ._buffered_text_reader import BufferedTextReader
from ._exceptions import LogSourceUnavailableError
from ._globals import LogRecord
from ._s3_log_line_parser import parse_s3_log_line
from ._s3_log_batch_processor import (
    BatchResult,
    merge_batch_results,
    process_raw_s3_log_lines,
    process_raw_s3_log_text,
)
from ._s3_log_statistics_aggregator import (
    ResourceStatistics,
    StatisticsTable,
    aggregate_s3_log_records,
    merge_statistics_tables,
)
from ._local_log_source import find_local_s3_log_file_paths, process_raw_s3_log_file
from ._s3_object_source import find_s3_log_object_keys, get_s3_client, iter_s3_log_object_texts
from ._s3_log_statistics import (
    StatisticsReport,
    get_local_s3_log_statistics,
    get_remote_s3_log_statistics,
    process_all_raw_s3_log_texts,
)
from ._statistics_serialization import (
    statistics_table_to_data_frame,
    statistics_table_to_json,
    write_statistics_table,
)

__all__ = [
    "S3_LOGS_PARSER_BASE_FOLDER_PATH",
    "S3LogsParserConfiguration",
    "load_configuration",
    "BufferedTextReader",
    "LogSourceUnavailableError",
    "LogRecord",
    "parse_s3_log_line",
    "BatchResult",
    "merge_batch_results",
    "process_raw_s3_log_lines",
    "process_raw_s3_log_text",
    "ResourceStatistics",
    "StatisticsTable",
    "aggregate_s3_log_records",
    "merge_statistics_tables",
    "find_local_s3_log_file_paths",
    "process_raw_s3_log_file",
    "find_s3_log_object_keys",
    "get_s3_client",
    "iter_s3_log_object_texts",
    "StatisticsReport",
    "get_local_s3_log_statistics",
    "get_remote_s3_log_statistics",
    "process_all_raw_s3_log_texts",
    "statistics_table_to_data_frame",
    "statistics_table_to_json",
    "write_statistics_table",
]
