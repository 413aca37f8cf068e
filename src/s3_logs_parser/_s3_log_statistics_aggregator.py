"""Fold retained S3 log records into per-object statistics."""

import dataclasses
import importlib.metadata
import uuid
import warnings
from collections.abc import Iterable

from ._config import S3LogsParserConfiguration
from ._error_collection import _collect_error, _format_exception_message
from ._globals import _MILLISECONDS_PER_MINUTE, LogRecord
from ._s3_log_line_parser import _get_log_date


@dataclasses.dataclass
class ResourceStatistics:
    """Running totals for a single object key."""

    downloads: int = 0
    bandwidth: int = 0
    total_request_time_in_minutes: float = 0.0
    dates: set[str] = dataclasses.field(default_factory=set)


StatisticsTable = dict[str, ResourceStatistics]


def aggregate_s3_log_records(
    *, records: Iterable[LogRecord], configuration: S3LogsParserConfiguration
) -> StatisticsTable:
    """
    Aggregate download records into a table of statistics keyed by object key.

    Every record with a non-empty object key counts as one download. Bandwidth, total request time, and the
    distinct days of access are only accumulated for records on or after the `date_cutoff` of the configuration.

    Records whose timestamp cannot be decomposed into a day still count as a download; the rest of their
    contribution is skipped and the problem is written to the error collection. If the error collection itself cannot
    be written, a warning is issued instead and aggregation continues.

    Parameters
    ----------
    records : iterable of LogRecord
        The retained records of all processed logs, in the order the logs were enumerated.
    configuration : S3LogsParserConfiguration
        Supplies the optional `date_cutoff`.

    Returns
    -------
    statistics_table : dict of str to ResourceStatistics
        A new table owned by the caller.
    """
    date_cutoff = configuration.date_cutoff
    task_id = str(uuid.uuid4())[:5]

    statistics_table: StatisticsTable = dict()
    for record in records:
        object_key = record.object_key
        if not object_key:
            continue

        if object_key not in statistics_table:
            statistics_table[object_key] = ResourceStatistics()
        resource_statistics = statistics_table[object_key]

        resource_statistics.downloads += 1

        try:
            date = _get_log_date(timestamp=record.timestamp)
        except ValueError as exception:
            message = _format_exception_message(
                preamble=f"Unable to extract the date from timestamp '{record.timestamp}' of record {record}.",
                exception=exception,
            )
            try:
                _collect_error(message=message, error_type="date", task_id=task_id)
            except (OSError, importlib.metadata.PackageNotFoundError) as collection_exception:
                warnings.warn(
                    message=f"Unable to collect a date error ({collection_exception}); the record was still counted.",
                    stacklevel=2,
                )

            continue

        if date_cutoff is not None and date < date_cutoff:
            continue

        resource_statistics.dates.add(date.isoformat())

        if record.bytes_sent.isdecimal():
            resource_statistics.bandwidth += int(record.bytes_sent)

        if record.total_time.isdecimal():
            resource_statistics.total_request_time_in_minutes += int(record.total_time) / _MILLISECONDS_PER_MINUTE

    return statistics_table


def merge_statistics_tables(*statistics_tables: StatisticsTable) -> StatisticsTable:
    """
    Merge partial statistics tables, such as those aggregated from separate groups of logs.

    Scalar totals are summed and dates are unioned per object key. The input tables are left untouched.
    """
    merged_statistics_table: StatisticsTable = dict()
    for statistics_table in statistics_tables:
        for object_key, resource_statistics in statistics_table.items():
            if object_key not in merged_statistics_table:
                merged_statistics_table[object_key] = ResourceStatistics()
            merged_resource_statistics = merged_statistics_table[object_key]

            merged_resource_statistics.downloads += resource_statistics.downloads
            merged_resource_statistics.bandwidth += resource_statistics.bandwidth
            merged_resource_statistics.total_request_time_in_minutes += (
                resource_statistics.total_request_time_in_minutes
            )
            merged_resource_statistics.dates |= resource_statistics.dates

    return merged_statistics_table
