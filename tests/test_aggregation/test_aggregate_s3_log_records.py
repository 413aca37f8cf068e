import itertools
import pathlib

import pytest

import s3_logs_parser

SCENARIO_LINE = (
    "webmaster webmaster-logs [19/Apr/2022:10:00:00 +0000] 1.2.3.4 - REQID REST.GET.OBJECT photo.jpg "
    '"GET /photo.jpg HTTP/1.1" 200 - 1024 2048 50 10 "-" "curl/7.0" -'
)


def _get_statistics_table(
    *, raw_s3_log_texts: list[str], configuration: s3_logs_parser.S3LogsParserConfiguration
) -> s3_logs_parser.StatisticsTable:
    batch_result = s3_logs_parser.process_all_raw_s3_log_texts(
        raw_s3_log_texts=raw_s3_log_texts, configuration=configuration
    )

    return s3_logs_parser.aggregate_s3_log_records(records=batch_result.records, configuration=configuration)


def _make_log_record(**fields: str) -> s3_logs_parser.LogRecord:
    log_record = s3_logs_parser.parse_s3_log_line(raw_s3_log_line=SCENARIO_LINE)

    return log_record._replace(**fields)


def test_scenario_download_after_cutoff() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration(date_cutoff="2022-04-16")
    statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 1
    assert resource_statistics.bandwidth == 1024
    assert resource_statistics.dates == {"2022-04-19"}
    assert resource_statistics.total_request_time_in_minutes == pytest.approx(0.000833, rel=1e-3)


def test_scenario_download_before_cutoff() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration(date_cutoff="2022-04-20")
    statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 1
    assert resource_statistics.bandwidth == 0
    assert resource_statistics.dates == set()
    assert resource_statistics.total_request_time_in_minutes == 0


def test_scenario_download_excluded() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration(exclude_lines_matching="curl/7.0")
    statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)

    assert "photo.jpg" not in statistics_table


def test_scenario_same_line_in_two_logs() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration(date_cutoff="2022-04-16")
    statistics_table = _get_statistics_table(
        raw_s3_log_texts=[SCENARIO_LINE + "\n", SCENARIO_LINE + "\n"], configuration=configuration
    )

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 2
    assert resource_statistics.bandwidth == 2048
    assert resource_statistics.dates == {"2022-04-19"}
    assert resource_statistics.total_request_time_in_minutes == pytest.approx(100 / 60_000)


def test_cutoff_on_the_same_day_is_inclusive() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration(date_cutoff="2022-04-19")
    statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)

    assert statistics_table["photo.jpg"].bandwidth == 1024
    assert statistics_table["photo.jpg"].dates == {"2022-04-19"}


def test_dates_are_distinct_days() -> None:
    records = [
        _make_log_record(timestamp="[19/Apr/2022:10:00:00 +0000]"),
        _make_log_record(timestamp="[19/Apr/2022:23:59:59 +0000]"),
        _make_log_record(timestamp="[01/May/2022:00:00:00 +0000]"),
        _make_log_record(timestamp="[19/Apr/2022:12:30:00 +0000]"),
    ]

    configuration = s3_logs_parser.S3LogsParserConfiguration()
    statistics_table = s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)

    assert statistics_table["photo.jpg"].downloads == 4
    assert statistics_table["photo.jpg"].dates == {"2022-04-19", "2022-05-01"}


def test_non_numeric_bytes_and_time_contribute_nothing() -> None:
    records = [
        _make_log_record(bytes_sent="-", total_time="-"),
        _make_log_record(bytes_sent="12", total_time="6000"),
        _make_log_record(bytes_sent="1e3", total_time="-5"),
    ]

    configuration = s3_logs_parser.S3LogsParserConfiguration()
    statistics_table = s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 3
    assert resource_statistics.bandwidth == 12
    assert resource_statistics.total_request_time_in_minutes == pytest.approx(0.1)


def test_empty_object_key_is_skipped() -> None:
    records = [_make_log_record(object_key=""), _make_log_record()]

    configuration = s3_logs_parser.S3LogsParserConfiguration()
    statistics_table = s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)

    assert list(statistics_table.keys()) == ["photo.jpg"]
    assert statistics_table["photo.jpg"].downloads == 1


def test_malformed_date_only_counts_the_download(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(s3_logs_parser._error_collection, "S3_LOGS_PARSER_BASE_FOLDER_PATH", tmp_path)

    # Count initial error folder contents
    error_folder = tmp_path / "errors"
    error_folder_contents = list(error_folder.iterdir()) if error_folder.exists() else list()
    initial_number_of_error_folder_contents = len(error_folder_contents)

    records = [
        _make_log_record(timestamp="[2022-04-19T10:00:00Z]"),
        _make_log_record(timestamp="[19/Foo/2022:10:00:00 +0000]"),
        _make_log_record(),
    ]

    configuration = s3_logs_parser.S3LogsParserConfiguration()
    statistics_table = s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 3
    assert resource_statistics.bandwidth == 1024
    assert resource_statistics.dates == {"2022-04-19"}
    assert resource_statistics.total_request_time_in_minutes == pytest.approx(50 / 60_000)

    post_test_error_folder_contents = list(error_folder.iterdir())
    assert (
        len(post_test_error_folder_contents) == initial_number_of_error_folder_contents + 1
    ), "Malformed dates were not collected!"


def test_malformed_date_with_unwritable_error_collection(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # A regular file in place of the base folder makes creating the errors folder fail
    blocking_file_path = tmp_path / "blocker"
    blocking_file_path.write_text("")
    monkeypatch.setattr(s3_logs_parser._error_collection, "S3_LOGS_PARSER_BASE_FOLDER_PATH", blocking_file_path)

    records = [_make_log_record(timestamp="[bad]"), _make_log_record()]

    configuration = s3_logs_parser.S3LogsParserConfiguration()
    with pytest.warns(UserWarning, match="Unable to collect a date error"):
        statistics_table = s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)

    resource_statistics = statistics_table["photo.jpg"]
    assert resource_statistics.downloads == 2
    assert resource_statistics.bandwidth == 1024
    assert resource_statistics.dates == {"2022-04-19"}


def test_aggregation_does_not_depend_on_shared_state() -> None:
    configuration = s3_logs_parser.S3LogsParserConfiguration()
    first_statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)
    second_statistics_table = _get_statistics_table(raw_s3_log_texts=[SCENARIO_LINE], configuration=configuration)

    first_statistics_table["photo.jpg"].dates.add("2000-01-01")

    assert second_statistics_table["photo.jpg"].downloads == 1
    assert second_statistics_table["photo.jpg"].dates == {"2022-04-19"}


def test_merge_statistics_tables_equals_aggregating_the_concatenation() -> None:
    partial_records = [
        [
            _make_log_record(timestamp="[10/Apr/2022:10:00:00 +0000]", bytes_sent="100", total_time="10"),
            _make_log_record(object_key="a.txt", bytes_sent="7"),
        ],
        [
            _make_log_record(timestamp="[20/Apr/2022:10:00:00 +0000]", bytes_sent="200", total_time="20"),
            _make_log_record(object_key="b.txt", bytes_sent="-"),
        ],
        [
            _make_log_record(timestamp="[20/Apr/2022:11:00:00 +0000]", bytes_sent="300", total_time="30"),
            _make_log_record(object_key="a.txt", timestamp="[21/Apr/2022:11:00:00 +0000]", bytes_sent="8"),
        ],
    ]

    configuration = s3_logs_parser.S3LogsParserConfiguration(date_cutoff="2022-04-16")
    expected_statistics_table = s3_logs_parser.aggregate_s3_log_records(
        records=itertools.chain.from_iterable(partial_records), configuration=configuration
    )

    partial_statistics_tables = [
        s3_logs_parser.aggregate_s3_log_records(records=records, configuration=configuration)
        for records in partial_records
    ]
    for ordered_partial_statistics_tables in itertools.permutations(partial_statistics_tables):
        merged_statistics_table = s3_logs_parser.merge_statistics_tables(*ordered_partial_statistics_tables)

        assert merged_statistics_table.keys() == expected_statistics_table.keys()
        for object_key, expected_resource_statistics in expected_statistics_table.items():
            merged_resource_statistics = merged_statistics_table[object_key]

            assert merged_resource_statistics.downloads == expected_resource_statistics.downloads
            assert merged_resource_statistics.bandwidth == expected_resource_statistics.bandwidth
            assert merged_resource_statistics.dates == expected_resource_statistics.dates
            assert merged_resource_statistics.total_request_time_in_minutes == pytest.approx(
                expected_resource_statistics.total_request_time_in_minutes
            )

    # The partial tables themselves are left untouched
    assert partial_statistics_tables[0]["photo.jpg"].downloads == 1
    assert partial_statistics_tables[0]["photo.jpg"].dates == set()
