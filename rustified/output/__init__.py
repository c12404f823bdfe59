"""Report line printing, the console summary and JSON reports."""
