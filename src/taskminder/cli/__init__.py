"""Console front end: command registry, REPL and the composition root."""
