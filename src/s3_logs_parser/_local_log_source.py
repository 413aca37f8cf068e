"""Enumerate and read raw S3 log files from a local folder."""

import pathlib

from ._buffered_text_reader import BufferedTextReader
from ._config import S3LogsParserConfiguration
from ._exceptions import LogSourceUnavailableError
from ._s3_log_batch_processor import BatchResult, merge_batch_results, process_raw_s3_log_lines


def find_local_s3_log_file_paths(*, raw_s3_logs_folder_path: str | pathlib.Path) -> list[pathlib.Path]:
    """
    List the raw S3 log files directly inside a folder, sorted by name.

    Subfolders are not searched.
    """
    raw_s3_logs_folder_path = pathlib.Path(raw_s3_logs_folder_path)

    if not raw_s3_logs_folder_path.exists():
        raise LogSourceUnavailableError(f"The raw S3 logs folder '{raw_s3_logs_folder_path}' does not exist!")
    if not raw_s3_logs_folder_path.is_dir():
        raise LogSourceUnavailableError(f"The raw S3 logs path '{raw_s3_logs_folder_path}' is not a folder!")

    try:
        raw_s3_log_file_paths = sorted(path for path in raw_s3_logs_folder_path.iterdir() if path.is_file())
    except OSError as exception:
        raise LogSourceUnavailableError(
            f"Unable to list the raw S3 logs folder '{raw_s3_logs_folder_path}'!"
        ) from exception

    return raw_s3_log_file_paths


def process_raw_s3_log_file(
    *,
    raw_s3_log_file_path: pathlib.Path,
    configuration: S3LogsParserConfiguration,
    maximum_buffer_size_in_bytes: int = 10**9,
) -> BatchResult:
    """
    Process one raw S3 log file, reading it in line-aligned buffers to bound memory usage.

    The result is identical to processing the full text of the file at once.
    """
    try:
        buffered_text_reader = BufferedTextReader(
            file_path=raw_s3_log_file_path,
            maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
        )
    except OSError as exception:
        raise LogSourceUnavailableError(f"Unable to read the raw S3 log file '{raw_s3_log_file_path}'!") from exception

    batch_result = merge_batch_results(
        batch_results=(
            process_raw_s3_log_lines(raw_s3_log_lines=raw_s3_log_lines, configuration=configuration)
            for raw_s3_log_lines in buffered_text_reader
        )
    )

    return batch_result
