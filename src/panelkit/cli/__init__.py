"""Command-line interface for panelkit."""
