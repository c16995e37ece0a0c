import logging
import sys


# boto3/botocore 는 DEBUG 에서 요청/응답을 모두 찍으므로 -vv 부터만 노출한다.
_NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity >= 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )

    sdk_level = logging.DEBUG if verbosity >= 2 else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
