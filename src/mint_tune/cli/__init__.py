"""Command-line interface for mint-tune."""
