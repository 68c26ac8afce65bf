"""Shared utilities: error hierarchy, logging setup and text hashing."""
