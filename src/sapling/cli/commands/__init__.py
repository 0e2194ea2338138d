"""CLI commands for sapling."""
