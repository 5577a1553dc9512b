"""Mapping of post query input onto query engine arguments."""
