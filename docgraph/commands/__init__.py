"""Commands package for docgraph CLI."""
