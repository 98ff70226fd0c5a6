"""AISummary work journal and report synthesis service."""
