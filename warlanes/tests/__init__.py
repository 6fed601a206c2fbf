"""Tests for the War-Lanes engine."""
