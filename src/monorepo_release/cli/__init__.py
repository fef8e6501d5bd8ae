"""Command line interface for monorepo-release."""
