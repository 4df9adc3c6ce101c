"""Read-only query selectors over the submission store."""
