"""twig CLI commands - subcommand implementations, loaded lazily by twig.cli."""
