import logging
import os
import sys

import pytest

# main.py and friends live at the repo root, not in a package.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from codegen import IdGenerator  # noqa: E402


@pytest.fixture
def ids():
    """A fresh label id counter, shared by every class compiled in one test."""
    return IdGenerator()


@pytest.fixture(autouse=True)
def restore_log_level():
    # the CLI entry points call setup_logging, which changes the root level
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
