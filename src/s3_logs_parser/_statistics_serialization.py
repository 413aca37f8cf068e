"""Convert a statistics table into reporting formats."""

import json
import pathlib

import pandas

from ._s3_log_statistics_aggregator import StatisticsTable

_STATISTICS_COLUMNS = ("downloads", "bandwidth", "totalRequestTimeInMinutes", "dates")


def statistics_table_to_data_frame(*, statistics_table: StatisticsTable) -> pandas.DataFrame:
    """
    Tabulate a statistics table with one row per object key, sorted by object key.

    The dates of each object key are sorted and joined by semicolons.
    """
    data = {
        object_key: {
            "downloads": resource_statistics.downloads,
            "bandwidth": resource_statistics.bandwidth,
            "totalRequestTimeInMinutes": resource_statistics.total_request_time_in_minutes,
            "dates": ";".join(sorted(resource_statistics.dates)),
        }
        for object_key, resource_statistics in sorted(statistics_table.items())
    }

    data_frame = pandas.DataFrame.from_dict(data=data, orient="index", columns=list(_STATISTICS_COLUMNS))
    data_frame.index.name = "object_key"
    data_frame = data_frame.astype({"downloads": "int64", "bandwidth": "int64", "totalRequestTimeInMinutes": "float64"})

    return data_frame


def write_statistics_table(*, statistics_table: StatisticsTable, statistics_file_path: str | pathlib.Path) -> None:
    """Write a statistics table to a tab-separated file, or to a JSON file if the path ends in '.json'."""
    statistics_file_path = pathlib.Path(statistics_file_path)

    if statistics_file_path.suffix == ".json":
        with open(file=statistics_file_path, mode="w") as io:
            io.write(statistics_table_to_json(statistics_table=statistics_table))

        return None

    data_frame = statistics_table_to_data_frame(statistics_table=statistics_table)
    data_frame.to_csv(path_or_buf=statistics_file_path, sep="\t", header=True, index=True)

    return None


def statistics_table_to_json(*, statistics_table: StatisticsTable, indent: int | None = None) -> str:
    """Encode a statistics table in the JSON payload served to reporting clients."""
    data = {
        object_key: {
            "downloads": resource_statistics.downloads,
            "bandwidth": resource_statistics.bandwidth,
            "totalRequestTimeInMinutes": resource_statistics.total_request_time_in_minutes,
            "dates": sorted(resource_statistics.dates),
        }
        for object_key, resource_statistics in statistics_table.items()
    }
    payload = {"success": True, "statistics": {"data": data}}

    return json.dumps(payload, indent=indent)
