"""Terminal-facing layer: CLI commands, config wizard and coloured output."""
