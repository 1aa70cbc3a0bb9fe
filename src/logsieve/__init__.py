"""Device log stream parsing, bounded retention and multi-filter dispatch."""
