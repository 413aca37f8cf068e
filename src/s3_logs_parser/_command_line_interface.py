"""Call the S3 logs parser from the command line."""

import collections
import datetime
import pathlib

import click

from ._config import S3LogsParserConfiguration, load_configuration
from ._s3_log_statistics import StatisticsReport, get_local_s3_log_statistics, get_remote_s3_log_statistics
from ._s3_object_source import get_s3_client
from ._statistics_serialization import statistics_table_to_json, write_statistics_table

_configuration_options = [
    click.option(
        "--configuration_file_path",
        help=(
            "A YAML file containing a mapping of configuration options. "
            "Options passed on the command line take precedence."
        ),
        required=False,
        type=click.Path(exists=True, dir_okay=False),
        default=None,
    ),
    click.option(
        "--exclude_lines_matching",
        help="Skip every raw log line containing this substring (e.g., the user agent of a health check).",
        required=False,
        type=str,
        default=None,
    ),
    click.option(
        "--date_cutoff",
        help=(
            "The earliest day (YYYY-MM-DD) for which bandwidth, request time, and dates are accumulated. "
            "Downloads before this day are still counted."
        ),
        required=False,
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
    ),
    click.option(
        "--statistics_file_path",
        help="The file to write the statistics to; '.json' or tab-separated otherwise. Defaults to JSON on stdout.",
        required=False,
        type=click.Path(writable=True, dir_okay=False),
        default=None,
    ),
]


def _add_options(options: list):
    def decorator(function):
        for option in reversed(options):
            function = option(function)
        return function

    return decorator


@click.command(name="get_local_s3_log_statistics")
@click.option(
    "--raw_s3_logs_folder_path",
    help="The path to the folder containing all raw S3 log files.",
    required=True,
    type=click.Path(writable=False),
)
@click.option(
    "--maximum_number_of_workers",
    help="The maximum number of workers to distribute tasks across.",
    required=False,
    type=click.IntRange(min=1),
    default=1,
)
@click.option(
    "--maximum_buffer_size_in_mb",
    help=(
        "The theoretical maximum amount of RAM (in MB) to use on each buffer iteration when reading from the "
        "source text files. "
        "Automatically splits this total amount over the maximum number of workers if `maximum_number_of_workers` is "
        "greater than one."
    ),
    required=False,
    type=click.IntRange(min=1),  # Bare minimum of 1 MB
    default=1_000,  # 1 GB recommended
)
@_add_options(_configuration_options)
def _get_local_s3_log_statistics_cli(
    raw_s3_logs_folder_path: str,
    maximum_number_of_workers: int,
    maximum_buffer_size_in_mb: int,
    configuration_file_path: str | None,
    exclude_lines_matching: str | None,
    date_cutoff: datetime.datetime | None,
    statistics_file_path: str | None,
) -> None:
    configuration = _resolve_configuration(
        configuration_file_path=configuration_file_path,
        exclude_lines_matching=exclude_lines_matching,
        date_cutoff=date_cutoff,
    )
    maximum_buffer_size_in_bytes = maximum_buffer_size_in_mb * 10**6

    statistics_report = get_local_s3_log_statistics(
        raw_s3_logs_folder_path=raw_s3_logs_folder_path,
        configuration=configuration,
        maximum_number_of_workers=maximum_number_of_workers,
        maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
    )
    _report_statistics(statistics_report=statistics_report, statistics_file_path=statistics_file_path)

    return None


@click.command(name="get_remote_s3_log_statistics")
@click.option(
    "--bucket",
    help="The name of the bucket the server access logs are delivered to.",
    required=True,
    type=str,
)
@click.option(
    "--prefix",
    help="The key prefix the server access logs are delivered under.",
    required=False,
    type=str,
    default="",
)
@click.option(
    "--date",
    help="Only process log objects delivered on this day (YYYY-MM-DD).",
    required=False,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
)
@click.option(
    "--region",
    help="The AWS region of the bucket. Credentials are resolved from the standard AWS configuration.",
    required=False,
    type=str,
    default=None,
)
@_add_options(_configuration_options)
def _get_remote_s3_log_statistics_cli(
    bucket: str,
    prefix: str,
    date: datetime.datetime | None,
    region: str | None,
    configuration_file_path: str | None,
    exclude_lines_matching: str | None,
    date_cutoff: datetime.datetime | None,
    statistics_file_path: str | None,
) -> None:
    configuration = _resolve_configuration(
        configuration_file_path=configuration_file_path,
        exclude_lines_matching=exclude_lines_matching,
        date_cutoff=date_cutoff,
    )

    statistics_report = get_remote_s3_log_statistics(
        bucket=bucket,
        prefix=prefix,
        date=date.date() if date is not None else None,
        configuration=configuration,
        s3_client=get_s3_client(region_name=region),
    )
    _report_statistics(statistics_report=statistics_report, statistics_file_path=statistics_file_path)

    return None


def _resolve_configuration(
    *,
    configuration_file_path: str | None,
    exclude_lines_matching: str | None,
    date_cutoff: datetime.datetime | None,
) -> S3LogsParserConfiguration:
    base_configuration = (
        load_configuration(configuration_file_path=configuration_file_path)
        if configuration_file_path is not None
        else S3LogsParserConfiguration()
    )

    overrides = dict()
    if exclude_lines_matching is not None:
        overrides["exclude_lines_matching"] = exclude_lines_matching
    if date_cutoff is not None:
        overrides["date_cutoff"] = date_cutoff.date()

    return S3LogsParserConfiguration(**{**base_configuration.model_dump(), **overrides})


def _report_statistics(*, statistics_report: StatisticsReport, statistics_file_path: str | None) -> None:
    statistics_table = statistics_report.statistics_table

    if statistics_file_path is None:
        click.echo(statistics_table_to_json(statistics_table=statistics_table, indent=2))
    else:
        write_statistics_table(
            statistics_table=statistics_table, statistics_file_path=pathlib.Path(statistics_file_path)
        )

    operation_counts = collections.Counter(statistics_report.operation_counts)
    click.echo("Total operations:", err=True)
    for operation, count in operation_counts.most_common():
        click.echo(f"  {operation}: {count}", err=True)

    return None
