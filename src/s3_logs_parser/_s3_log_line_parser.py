"""
Primary functions for parsing a single line of a raw S3 log.

The strategy is to...

1) Match the raw line against a single compiled pattern whose named groups follow the S3 server access log format.
2) Construct a LogRecord from the named groups. A collections.namedtuple object is used for performance.
   No type coercion happens at this stage; every field is kept as the captured string.

Lines that do not satisfy the full pattern (truncated writes, non-log content) are not errors; they simply do not
produce a record.
"""

import datetime

from ._globals import _S3_LOG_REGEX, LogRecord


def parse_s3_log_line(*, raw_s3_log_line: str) -> LogRecord | None:
    """
    Parse a single raw line of an S3 log file.

    Parameters
    ----------
    raw_s3_log_line : str
        A single line of a raw S3 log file, with or without the trailing line break.

    Returns
    -------
    log_record : LogRecord or None
        The named fields of the line, or None if the line does not match the log format.
    """
    match = _S3_LOG_REGEX.search(string=raw_s3_log_line)
    if match is None:
        return None

    return LogRecord(**match.groupdict())


def _get_log_date(*, timestamp: str) -> datetime.date:
    """
    Extract the calendar day from a bracketed S3 log timestamp, such as '[19/Apr/2022:10:00:00 +0000]'.

    Raises a ValueError if the day portion is not of the form 'day/Month-abbreviation/year'.
    """
    day_string = timestamp.split(" ")[0].lstrip("[").split(":")[0]

    return datetime.datetime.strptime(day_string, "%d/%b/%Y").date()
