"""Commit enrichment and package-membership filtering.

- model: Commit / EnrichedCommit records
- cache: memoized commit file lookups
- enrich: concurrency-bounded attachment of changed files
- membership: path-segment matching against package and dependency roots
"""
