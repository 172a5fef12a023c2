#!/usr/bin/env python3
"""Tests for episode and person slug derivation."""

import re
import unittest

import pytest

from podcast_ingest.slugs import generate_slug, person_slug

SLUG_CHARS_RE = re.compile(r"^[a-z0-9-]*$")


@pytest.mark.unit
class TestGenerateSlug(unittest.TestCase):
    """Title slugs: lowercase ASCII words joined by single hyphens."""

    def test_simple_title(self):
        self.assertEqual(generate_slug("Hello World"), "hello-world")
        self.assertEqual(generate_slug("My GREAT Podcast Episode"), "my-great-podcast-episode")

    def test_trims_whitespace(self):
        self.assertEqual(generate_slug("  hello world  "), "hello-world")

    def test_ampersand_becomes_and(self):
        self.assertEqual(generate_slug("Salt & Pepper"), "salt-and-pepper")
        self.assertEqual(generate_slug("A & B & C"), "a-and-b-and-c")
        self.assertEqual(generate_slug("&"), "and")
        self.assertEqual(generate_slug("!@#$%^&*()"), "and")

    def test_straight_apostrophes_removed(self):
        self.assertEqual(generate_slug("It's a Beautiful Day"), "its-a-beautiful-day")

    def test_curly_apostrophe_becomes_separator(self):
        self.assertEqual(generate_slug("It’s a Test"), "it-s-a-test")

    def test_punctuation(self):
        self.assertEqual(generate_slug("Hello! How are you?"), "hello-how-are-you")
        self.assertEqual(
            generate_slug("Episode (Part 1) [Remastered]"), "episode-part-1-remastered"
        )
        self.assertEqual(
            generate_slug("Ep 42: The Answer - Part 2; Finale"), "ep-42-the-answer-part-2-finale"
        )
        self.assertEqual(generate_slug("Dr. Smith, Ph.D."), "dr-smith-ph-d")

    def test_hyphen_collapsing(self):
        self.assertEqual(generate_slug("hello---world"), "hello-world")
        self.assertEqual(generate_slug("---hello"), "hello")
        self.assertEqual(generate_slug("hello---"), "hello")
        self.assertEqual(generate_slug("a!@#$%b"), "a-b")

    def test_episode_number_prefix(self):
        self.assertEqual(generate_slug("My Episode", 42), "42-my-episode")
        self.assertEqual(generate_slug("Intro", 0), "0-intro")
        self.assertEqual(generate_slug("My Episode", None), "my-episode")
        self.assertEqual(generate_slug("Test", -1), "-1-test")

    def test_non_ascii_is_separator(self):
        self.assertEqual(generate_slug("Café Résumé"), "caf-r-sum")
        self.assertEqual(generate_slug("Great Episode \U0001F399️ Podcast"), "great-episode-podcast")
        self.assertEqual(generate_slug("Episode 日本語 Title"), "episode-title")

    def test_empty_results(self):
        self.assertEqual(generate_slug(""), "")
        self.assertEqual(generate_slug("   "), "")
        self.assertEqual(generate_slug("---"), "")
        self.assertEqual(generate_slug(None), "")

    def test_empty_title_gets_no_number_prefix(self):
        self.assertEqual(generate_slug("???", 5), "")

    def test_numeric_title_coerced(self):
        self.assertEqual(generate_slug(42), "42")

    def test_short_slug_not_truncated(self):
        self.assertEqual(generate_slug("short episode title"), "short-episode-title")

    def test_truncates_at_word_boundary(self):
        slug = generate_slug("word " * 25)
        self.assertLessEqual(len(slug), 100)
        self.assertFalse(slug.endswith("-"))
        self.assertTrue(all(part == "word" for part in slug.split("-")))

    def test_truncation_counts_episode_number(self):
        title = " ".join(f"word{i}" for i in range(20))
        slug = generate_slug(title, 999)
        self.assertLessEqual(len(slug), 100)
        self.assertTrue(slug.startswith("999-"))
        self.assertFalse(slug.endswith("-"))

    def test_cut_on_exact_boundary_keeps_last_word(self):
        # "abcde-" * 16 + "abcd" is exactly 100 characters, followed by a hyphen
        title = " ".join(["abcde"] * 16 + ["abcd", "tail"])
        slug = generate_slug(title)
        self.assertEqual(len(slug), 100)
        self.assertTrue(slug.endswith("-abcd"))

    def test_single_long_word_is_hard_cut(self):
        slug = generate_slug("a" * 150)
        self.assertEqual(slug, "a" * 100)

    def test_output_alphabet_and_idempotence(self):
        titles = [
            "Hello World",
            "Salt & Pepper",
            "It's 100% — fine?!",
            "  --Edge--Case--  ",
            "Café",
            "word " * 40,
        ]
        for title in titles:
            with self.subTest(title=title):
                slug = generate_slug(title)
                self.assertRegex(slug, SLUG_CHARS_RE)
                self.assertNotIn("--", slug)
                self.assertFalse(slug.startswith("-") or slug.endswith("-"))
                self.assertLessEqual(len(slug), 100)
                self.assertEqual(generate_slug(slug), slug)


@pytest.mark.unit
class TestPersonSlug(unittest.TestCase):
    def test_basic(self):
        self.assertEqual(person_slug("Jane Host"), "jane-host")

    def test_case_and_whitespace_insensitive(self):
        self.assertEqual(person_slug("  JANE   host "), "jane-host")

    def test_punctuation_removed_not_replaced(self):
        self.assertEqual(person_slug("Jane O'Host"), "jane-ohost")
        self.assertEqual(person_slug("Dr. Who?"), "dr-who")

    def test_hyphens_collapsed_and_trimmed(self):
        self.assertEqual(person_slug("-Mary -- Jane-"), "mary-jane")

    def test_ampersand_dropped(self):
        self.assertEqual(person_slug("Tom & Jerry"), "tom-jerry")

    def test_underscores_kept(self):
        self.assertEqual(person_slug("dev_guy"), "dev_guy")

    def test_empty(self):
        self.assertEqual(person_slug(""), "")
        self.assertEqual(person_slug("!!!"), "")
        self.assertEqual(person_slug(None), "")
