"""
Pytest configuration for test isolation.

The default currency and configuration are process-wide. Every test starts
from the EUR default with no TRDB_* variables leaking in from the shell.
"""

import os

import pytest

from trdb import config as config_module
from trdb.currency import Currency, set_default_currency


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("TRDB_"):
            monkeypatch.delenv(key)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "config", None)
    set_default_currency(Currency.EUR)
    yield
    set_default_currency(None)
