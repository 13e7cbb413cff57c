"""Qt viewer for generated worksheets."""
