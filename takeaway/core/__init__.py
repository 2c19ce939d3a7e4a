"""Cross-cutting pieces: exceptions, logger, clock."""
