"""Tests for gitpaq."""
