import os

import pytest

collect_ignore_glob = [] if os.environ.get("RUN_INTEGRATION") == "1" else ["test_*.py"]


@pytest.fixture()
def raw_email() -> str:
    # leading & trailing spaces to be sure trimming is handled
    return " Jeremy@Example.COM "
