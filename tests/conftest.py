"""
Shared test configuration.

Adds both the project root and src/ to sys.path so flat modules
(correlation_engine, api, visualizations, ...) and the analytics/ and
routes/ packages import with plain `import module_name`.
"""

import os
import sys

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

if _src_dir not in sys.path:
    sys.path.insert(1, _src_dir)


def entry(day, item_id, numeric=None, boolean=None, text=None):
    return {
        "entry_date": day,
        "trackable_item_id": item_id,
        "numeric_value": numeric,
        "boolean_value": boolean,
        "text_value": text,
    }


@pytest.fixture
def make_entry():
    """Factory for logged-entry rows."""
    return entry
