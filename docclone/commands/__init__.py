"""Click commands for the docclone CLI."""
