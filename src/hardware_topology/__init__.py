"""
hardware_topology

This package maps readout card inventory stored in Consul into host grouped
views and writes per card configuration back to the same store.

We keep modules small and well separated:
core contains shared data structures and errors
store contains the key value gateway interface and its adapters
topology contains parsing, identity, merge, catalog and serialization logic
config contains connector settings
api contains the request facing connector
"""
