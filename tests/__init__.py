"""Tests for pjbridge."""
