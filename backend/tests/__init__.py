"""Tests for the sales tracker backend."""
