"""DupSeeker CLI subcommands."""
