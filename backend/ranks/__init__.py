"""
Ranks app - rank hierarchy and static route manifests.

This app provides:
- Rank: the four-level hierarchy (crew < captain < commodore < admiral)
- Pure comparison helpers (has_minimum_rank, is_admiral, ...)
- RankManifest registry: per-rank allowlist, home route and nav tree
- validate_manifest: build-time consistency checks

Nothing here touches the database. Data-layer authorization lives in
accounts.authz, which re-derives rank from the sovereign user record.
"""
