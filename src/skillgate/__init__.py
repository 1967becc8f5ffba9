"""Per-turn skill activation engine.

Decides which catalog skills become active for a request under a per-turn
capacity, a dependency graph, affinity pairing and cross-turn deduplication.
"""

__version__ = "0.1.0"
