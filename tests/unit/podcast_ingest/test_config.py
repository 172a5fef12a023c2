#!/usr/bin/env python3
"""Tests for the Config model, environment overrides and config files."""

import json
import os
import tempfile
import unittest
from pathlib import Path

import pytest
from pydantic import ValidationError

from podcast_ingest import config

ENV_VARS = ("LOG_LEVEL", "LOG_FILE", "PODCAST_FEED_URL", "FEED_CACHE_TTL")


class _CleanEnvTestCase(unittest.TestCase):
    def setUp(self):
        self._saved_env = {var: os.environ.pop(var, None) for var in ENV_VARS}

    def tearDown(self):
        for var, value in self._saved_env.items():
            os.environ.pop(var, None)
            if value is not None:
                os.environ[var] = value


@pytest.mark.unit
class TestConfigDefaults(_CleanEnvTestCase):
    def test_defaults(self):
        cfg = config.Config()
        self.assertIsNone(cfg.feed_url)
        self.assertEqual(cfg.cache_ttl_seconds, 3600)
        self.assertEqual(cfg.timeout, 20)
        self.assertEqual(cfg.http_retries, 0)
        self.assertEqual(cfg.episodes_per_page, 12)
        self.assertEqual(cfg.log_level, "INFO")
        self.assertTrue(cfg.user_agent.startswith("podcast-ingest/"))

    def test_rss_alias(self):
        cfg = config.Config(rss="https://example.com/feed.xml")
        self.assertEqual(cfg.feed_url, "https://example.com/feed.xml")

    def test_frozen(self):
        cfg = config.Config()
        with self.assertRaises(ValidationError):
            cfg.timeout = 5

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValidationError):
            config.Config(output_dir="x")

    def test_bounds(self):
        for kwargs in (
            {"timeout": 0},
            {"cache_ttl_seconds": -1},
            {"http_retries": -1},
            {"episodes_per_page": 0},
            {"episodes_per_page": 101},
            {"cache_wait_timeout": 0},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(ValidationError):
                    config.Config(**kwargs)

    def test_log_level_normalized(self):
        self.assertEqual(config.Config(log_level=" debug ").log_level, "DEBUG")
        with self.assertRaises(ValidationError):
            config.Config(log_level="chatty")

    def test_blank_user_agent_uses_default(self):
        self.assertEqual(config.Config(user_agent="  ").user_agent, config.DEFAULT_USER_AGENT)

    def test_blank_feed_url_is_none(self):
        self.assertIsNone(config.Config(feed_url="   ").feed_url)


@pytest.mark.unit
class TestEnvironmentVariables(_CleanEnvTestCase):
    def test_log_level_env_overrides_config(self):
        os.environ["LOG_LEVEL"] = "error"
        cfg = config.Config(log_level="WARNING")
        self.assertEqual(cfg.log_level, "ERROR")

    def test_invalid_log_level_env_ignored(self):
        os.environ["LOG_LEVEL"] = "LOUD"
        self.assertEqual(config.Config().log_level, "INFO")

    def test_feed_url_env_fills_gap_only(self):
        os.environ["PODCAST_FEED_URL"] = "https://env.example.com/feed.xml"
        self.assertEqual(config.Config().feed_url, "https://env.example.com/feed.xml")
        cfg = config.Config(feed_url="https://explicit.example.com/feed.xml")
        self.assertEqual(cfg.feed_url, "https://explicit.example.com/feed.xml")
        self.assertEqual(config.Config(rss="https://alias.example.com/").feed_url, "https://alias.example.com/")

    def test_cache_ttl_env(self):
        os.environ["FEED_CACHE_TTL"] = "120"
        self.assertEqual(config.Config().cache_ttl_seconds, 120)
        self.assertEqual(config.Config(cache_ttl_seconds=30).cache_ttl_seconds, 30)

    def test_invalid_cache_ttl_env_ignored(self):
        os.environ["FEED_CACHE_TTL"] = "soon"
        self.assertEqual(config.Config().cache_ttl_seconds, 3600)

    def test_log_file_env(self):
        os.environ["LOG_FILE"] = "/tmp/ingest.log"
        self.assertEqual(config.Config().log_file, "/tmp/ingest.log")


@pytest.mark.unit
class TestLoadConfigFile(_CleanEnvTestCase):
    def setUp(self):
        super().setUp()
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

    def test_json(self):
        path = self.tmp / "cfg.json"
        path.write_text(json.dumps({"rss": "https://example.com/feed.xml", "timeout": 9}))
        cfg = config.Config(**config.load_config_file(str(path)))
        self.assertEqual(cfg.feed_url, "https://example.com/feed.xml")
        self.assertEqual(cfg.timeout, 9)

    def test_yaml(self):
        path = self.tmp / "cfg.yaml"
        path.write_text("feed_url: https://example.com/feed.xml\nepisodes_per_page: 20\n")
        data = config.load_config_file(str(path))
        self.assertEqual(data, {"feed_url": "https://example.com/feed.xml", "episodes_per_page": 20})

    def test_missing_file(self):
        with self.assertRaises(ValueError):
            config.load_config_file(str(self.tmp / "nope.yaml"))

    def test_empty_path(self):
        with self.assertRaises(ValueError):
            config.load_config_file("")

    def test_unsupported_extension(self):
        path = self.tmp / "cfg.toml"
        path.write_text("x = 1")
        with self.assertRaises(ValueError):
            config.load_config_file(str(path))

    def test_invalid_json(self):
        path = self.tmp / "cfg.json"
        path.write_text("{not json")
        with self.assertRaises(ValueError):
            config.load_config_file(str(path))

    def test_non_mapping(self):
        path = self.tmp / "cfg.yml"
        path.write_text("- a\n- b\n")
        with self.assertRaises(ValueError):
            config.load_config_file(str(path))
