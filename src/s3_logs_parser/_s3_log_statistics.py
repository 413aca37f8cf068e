"""Primary functions for computing usage statistics from raw S3 logs."""

import collections
import datetime
import os
import pathlib
import uuid
from collections.abc import Iterable
from concurrent.futures import ProcessPoolExecutor, as_completed

import tqdm
from pydantic import Field, validate_call

from ._config import S3LogsParserConfiguration
from ._error_collection import _collect_error, _format_exception_message
from ._local_log_source import find_local_s3_log_file_paths, process_raw_s3_log_file
from ._s3_log_batch_processor import BatchResult, merge_batch_results, process_raw_s3_log_text
from ._s3_log_statistics_aggregator import aggregate_s3_log_records
from ._s3_object_source import iter_s3_log_object_texts

StatisticsReport = collections.namedtuple("StatisticsReport", ["statistics_table", "operation_counts"])


def process_all_raw_s3_log_texts(
    *,
    raw_s3_log_texts: Iterable[str],
    configuration: S3LogsParserConfiguration,
    tqdm_kwargs: dict | None = None,
) -> BatchResult:
    """
    Process a sequence of raw S3 log texts and merge the results, preserving their order.

    Parameters
    ----------
    raw_s3_log_texts : iterable of strings
        The complete text of each log file or object.
    configuration : S3LogsParserConfiguration
        The exclusion and retention options to apply.
    tqdm_kwargs : dict, optional
        Keyword arguments to pass to the tqdm progress bar.
    """
    tqdm_kwargs = tqdm_kwargs or dict()

    resolved_tqdm_kwargs = dict(desc="Processing raw S3 logs...", leave=False, mininterval=3.0)
    resolved_tqdm_kwargs.update(tqdm_kwargs)

    batch_result = merge_batch_results(
        batch_results=(
            process_raw_s3_log_text(raw_s3_log_text=raw_s3_log_text, configuration=configuration)
            for raw_s3_log_text in tqdm.tqdm(iterable=raw_s3_log_texts, **resolved_tqdm_kwargs)
        )
    )

    return batch_result


@validate_call
def get_local_s3_log_statistics(
    *,
    raw_s3_logs_folder_path: str | pathlib.Path,
    configuration: S3LogsParserConfiguration | None = None,
    maximum_number_of_workers: int = Field(ge=1, default=1),
    maximum_buffer_size_in_bytes: int = Field(ge=3, default=10**9),
) -> StatisticsReport:
    """
    Compute usage statistics for every object key found in a folder of raw S3 log files.

    Parameters
    ----------
    raw_s3_logs_folder_path : path
        The folder containing the raw S3 log files. Every file directly inside the folder is processed, in order of
        file name; subfolders are ignored.
    configuration : S3LogsParserConfiguration, optional
        The exclusion, retention, and date cutoff options. Defaults to no exclusion and no cutoff.
    maximum_number_of_workers : int, default: 1
        The maximum number of worker processes to distribute the files across.
    maximum_buffer_size_in_bytes : int, default: 1 GB
        The theoretical maximum amount of RAM (in bytes) to use on each buffer iteration when reading from the
        source text files.

        Automatically splits this total amount over the maximum number of workers if `maximum_number_of_workers` is
        greater than one.

    Returns
    -------
    statistics_report : StatisticsReport
        The statistics table keyed by object key, and the total number of parsed lines per operation type.
    """
    configuration = configuration or S3LogsParserConfiguration()

    raw_s3_log_file_paths = find_local_s3_log_file_paths(raw_s3_logs_folder_path=raw_s3_logs_folder_path)

    if maximum_number_of_workers == 1:
        batch_results = [
            process_raw_s3_log_file(
                raw_s3_log_file_path=raw_s3_log_file_path,
                configuration=configuration,
                maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
            )
            for raw_s3_log_file_path in tqdm.tqdm(
                iterable=raw_s3_log_file_paths,
                total=len(raw_s3_log_file_paths),
                desc="Processing log files...",
                position=0,
                leave=True,
                smoothing=0,
            )
        ]
    else:
        maximum_buffer_size_in_bytes_per_worker = max(3, maximum_buffer_size_in_bytes // maximum_number_of_workers)

        futures = []
        with ProcessPoolExecutor(max_workers=maximum_number_of_workers) as executor:
            for raw_s3_log_file_path in raw_s3_log_file_paths:
                futures.append(
                    executor.submit(
                        _multi_worker_process_raw_s3_log_file,
                        raw_s3_log_file_path=raw_s3_log_file_path,
                        configuration=configuration,
                        maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes_per_worker,
                    )
                )

            progress_bar_iterable = tqdm.tqdm(
                iterable=as_completed(futures),
                total=len(futures),
                desc=f"Processing log files using {maximum_number_of_workers} workers...",
                position=0,
                leave=True,
                mininterval=3.0,
                smoothing=0,
            )
            for future in progress_bar_iterable:
                future.result()  # Raise any worker failure as soon as it is seen

        # Gathered in submission order so that records keep the enumeration order of the files
        batch_results = [future.result() for future in futures]

    batch_result = merge_batch_results(batch_results=batch_results)
    statistics_table = aggregate_s3_log_records(records=batch_result.records, configuration=configuration)

    return StatisticsReport(statistics_table=statistics_table, operation_counts=batch_result.operation_counts)


def get_remote_s3_log_statistics(
    *,
    bucket: str,
    prefix: str = "",
    date: datetime.date | None = None,
    configuration: S3LogsParserConfiguration | None = None,
    s3_client=None,
) -> StatisticsReport:
    """
    Compute usage statistics for every object key found in the raw S3 log objects of a bucket.

    Parameters
    ----------
    bucket : str
        The name of the bucket the server access logs are delivered to.
    prefix : str, default: ""
        The key prefix the logs are delivered under.
    date : datetime.date, optional
        If given, only log objects delivered on this day are processed.
    configuration : S3LogsParserConfiguration, optional
        The exclusion, retention, and date cutoff options. Defaults to no exclusion and no cutoff.
    s3_client : optional
        A boto3 S3 client. Defaults to a client built from the standard AWS configuration.

    Returns
    -------
    statistics_report : StatisticsReport
        The statistics table keyed by object key, and the total number of parsed lines per operation type.
    """
    configuration = configuration or S3LogsParserConfiguration()

    raw_s3_log_texts = iter_s3_log_object_texts(bucket=bucket, prefix=prefix, date=date, s3_client=s3_client)
    batch_result = process_all_raw_s3_log_texts(
        raw_s3_log_texts=raw_s3_log_texts,
        configuration=configuration,
        tqdm_kwargs=dict(desc=f"Processing log objects from bucket '{bucket}'..."),
    )
    statistics_table = aggregate_s3_log_records(records=batch_result.records, configuration=configuration)

    return StatisticsReport(statistics_table=statistics_table, operation_counts=batch_result.operation_counts)


# Function cannot be covered because the line calls occur on subprocesses
def _multi_worker_process_raw_s3_log_file(  # pragma: no cover
    *,
    raw_s3_log_file_path,
    configuration: S3LogsParserConfiguration,
    maximum_buffer_size_in_bytes: int,
) -> BatchResult:
    """
    A mostly pass-through function to process a single file on a worker.

    Also dumps the error stack (which is only typically seen by the worker and not sent back to the main stdout pipe)
    to the error collection before re-raising, so that a failure never results in a partial table.
    """
    try:
        return process_raw_s3_log_file(
            raw_s3_log_file_path=raw_s3_log_file_path,
            configuration=configuration,
            maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
        )
    except Exception as exception:
        message = _format_exception_message(
            preamble=f"Worker process {os.getpid()} processing {raw_s3_log_file_path} failed!",
            exception=exception,
        )
        task_id = str(uuid.uuid4())[:5]
        _collect_error(message=message, error_type="parallel", task_id=task_id)

        raise
