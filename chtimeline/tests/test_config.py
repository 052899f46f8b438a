#!/usr/bin/env python3
"""Unit tests for command line and environment settings."""

import os
import sys
from datetime import datetime, timedelta

import pytest

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.color_scale import ScaleMode  # noqa: E402
from core.config import build_arg_parser, settings_from_args  # noqa: E402
from core.errors import ConfigurationError  # noqa: E402
from core.metrics import CategoryType, HeatmapMetric  # noqa: E402

NOW = datetime(2025, 1, 1, 12, 0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('CHTIMELINE_DATADIR', 'CHTIMELINE_CLUSTER', 'CHTIMELINE_CATEGORY',
                 'CHTIMELINE_METRIC', 'CHTIMELINE_SCALE'):
        monkeypatch.delenv(name, raising=False)


def _settings(argv):
    args = build_arg_parser('test').parse_args(argv)
    return settings_from_args(args, now=NOW)


def test_defaults(tmp_path):
    settings = _settings(['-d', str(tmp_path)])

    assert settings.datadir == tmp_path
    assert settings.cluster == 'default'
    assert settings.category == CategoryType.QUERY_HASH
    assert settings.metric == HeatmapMetric.COUNT
    assert settings.scale == ScaleMode.LINEAR
    assert settings.to_time == NOW
    assert settings.from_time == NOW - timedelta(hours=24)
    assert settings.category_filter == '1=1'


def test_command_line_choices(tmp_path):
    settings = _settings(['-d', str(tmp_path), '--metric', 'memoryUsage', '--category', 'hosts',
                          '--scale', 'log10', '--log-compression', '99', '--from=-2h',
                          '-c', 'prod', '-w', "hostname = 'ch-1'"])

    assert settings.metric == HeatmapMetric.MEMORY_USAGE
    assert settings.category == CategoryType.HOSTS
    assert settings.scale == ScaleMode.LOG10
    assert settings.log_compression == 99
    assert settings.from_time == NOW - timedelta(hours=2)
    assert settings.cluster == 'prod'
    assert settings.category_filter == "hostname = 'ch-1'"


def test_environment_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv('CHTIMELINE_DATADIR', str(tmp_path))
    monkeypatch.setenv('CHTIMELINE_METRIC', 'cpuUsage')
    monkeypatch.setenv('CHTIMELINE_CATEGORY', 'errors')

    settings = _settings([])
    assert settings.datadir == tmp_path
    assert settings.metric == HeatmapMetric.CPU_USAGE
    assert settings.category == CategoryType.ERRORS


@pytest.mark.parametrize("argv", [
    ['--metric', 'latency'],
    ['--category', 'users'],
    ['--scale', 'log3'],
    ['--log-compression', '0'],
    ['--from', 'whenever'],
    ['--from', '+1h', '--to', 'now'],
])
def test_invalid_settings(tmp_path, argv):
    with pytest.raises(ConfigurationError):
        _settings(['-d', str(tmp_path)] + argv)


def test_missing_datadir(tmp_path):
    with pytest.raises(ConfigurationError):
        _settings([])
    with pytest.raises(ConfigurationError):
        _settings(['-d', str(tmp_path / 'missing')])
