"""
puppetdb_inventory

Inventory source that turns PuppetDB nodes and facts into a node set for
orchestration tooling.

We keep modules small and well separated:
core contains shared data structures, errors, config and serialization
puppetdb contains the query expressions and the PuppetDB client
inventory contains conversion, enrichment, fetching and the cached plugin
"""
