import collections
import re

_KNOWN_OPERATION_TYPES = (
    "REST.GET.OBJECT",
    "REST.PUT.OBJECT",
    "REST.HEAD.OBJECT",
    "REST.POST.OBJECT",
    "REST.COPY.PART",
    "REST.COPY.OBJECT_GET",
    "REST.DELETE.OBJECT",
    "REST.OPTIONS.PREFLIGHT",
    "BATCH.DELETE.OBJECT",
    "WEBSITE.GET.OBJECT",
    "REST.GET.BUCKETVERSIONS",
    "REST.GET.BUCKET",
)

_S3_LOG_FIELDS = (
    "bucket_owner",
    "bucket",
    "timestamp",
    "ip_address",
    "requester",
    "request_id",
    "operation",
    "object_key",
    "request_uri",
    "status_code",
    "error_code",
    "bytes_sent",
    "object_size",
    "total_time",
    "turn_around_time",
    "referrer",
    "user_agent",
    "version",
)
LogRecord = collections.namedtuple("LogRecord", _S3_LOG_FIELDS)

# https://docs.aws.amazon.com/AmazonS3/latest/userguide/LogFormat.html
# Only the leading fields are captured; newer trailing fields (host ID, SigV, cipher suite, ...) are ignored
_S3_LOG_REGEX = re.compile(
    pattern=(
        r"(?P<bucket_owner>\S+) (?P<bucket>\S+) (?P<timestamp>\[[^]]*\]) (?P<ip_address>\S+) "
        r"(?P<requester>\S+) (?P<request_id>\S+) (?P<operation>\S+) (?P<object_key>\S+) "
        r'(?P<request_uri>"[^"]*") (?P<status_code>\S+) (?P<error_code>\S+) (?P<bytes_sent>\S+) '
        r"(?P<object_size>\S+) (?P<total_time>\S+) (?P<turn_around_time>\S+) "
        r'(?P<referrer>"[^"]*") (?P<user_agent>"[^"]*") (?P<version>\S)'
    )
)

_MILLISECONDS_PER_MINUTE = 60_000
