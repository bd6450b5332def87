"""Adapters connecting the venue pipeline to HTTP sources, databases and the graph store."""
