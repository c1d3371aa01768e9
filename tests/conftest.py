import matplotlib
matplotlib.use("Agg")

import pytest

from logging_config import LoggingFlags

_DEFAULT_FLAGS = {k: v for k, v in vars(LoggingFlags).items() if k.isupper()}


@pytest.fixture(autouse=True)
def restore_logging_flags():
    yield
    for k, v in _DEFAULT_FLAGS.items():
        setattr(LoggingFlags, k, v)

