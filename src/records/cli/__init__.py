"""Command-line interface (typer app and interactive menus)."""
