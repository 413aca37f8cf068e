"""Filter and classify the lines of one raw S3 log text (a single file or remote object)."""

import collections
from collections.abc import Iterable

from ._buffered_text_reader import _split_text_into_lines
from ._config import S3LogsParserConfiguration
from ._globals import LogRecord
from ._s3_log_line_parser import parse_s3_log_line

BatchResult = collections.namedtuple("BatchResult", ["records", "operation_counts"])
BatchResult.__doc__ = """
The outcome of processing one raw S3 log text.

records : list of LogRecord
    The parsed records of the download operation type, in order of appearance.
operation_counts : collections.Counter
    The number of parsed records per operation type, counting every parsed record regardless of retention.
"""


def process_raw_s3_log_text(*, raw_s3_log_text: str, configuration: S3LogsParserConfiguration) -> BatchResult:
    """
    Process the full contents of one raw S3 log file or object.

    Parameters
    ----------
    raw_s3_log_text : str
        The complete text of the log. A trailing line break does not produce an extra empty line.
    configuration : S3LogsParserConfiguration
        The exclusion and retention options to apply.
    """
    raw_s3_log_lines = _split_text_into_lines(text=raw_s3_log_text)

    return process_raw_s3_log_lines(raw_s3_log_lines=raw_s3_log_lines, configuration=configuration)


def process_raw_s3_log_lines(
    *, raw_s3_log_lines: Iterable[str], configuration: S3LogsParserConfiguration
) -> BatchResult:
    exclude_lines_matching = configuration.exclude_lines_matching
    download_operation_type = configuration.download_operation_type

    records = []
    operation_counts = collections.Counter()
    for raw_s3_log_line in raw_s3_log_lines:
        if _is_line_excluded(raw_s3_log_line=raw_s3_log_line, exclude_lines_matching=exclude_lines_matching):
            continue

        log_record = parse_s3_log_line(raw_s3_log_line=raw_s3_log_line)
        if log_record is None:
            continue

        operation_counts[log_record.operation] += 1
        if log_record.operation == download_operation_type:
            records.append(log_record)

    return BatchResult(records=records, operation_counts=operation_counts)


def merge_batch_results(*, batch_results: Iterable[BatchResult]) -> BatchResult:
    """Concatenate the records (in the given order) and sum the operation counts of several batch results."""
    records: list[LogRecord] = []
    operation_counts = collections.Counter()
    for batch_result in batch_results:
        records.extend(batch_result.records)
        operation_counts.update(batch_result.operation_counts)

    return BatchResult(records=records, operation_counts=operation_counts)


def _is_line_excluded(*, raw_s3_log_line: str, exclude_lines_matching: str | None) -> bool:
    if not exclude_lines_matching:
        return False

    return exclude_lines_matching in raw_s3_log_line
