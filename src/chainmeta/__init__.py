"""chainmeta: curated token, vault and validator metadata tooling.

This package contains the validation pass for the metadata lists, the asset
maintenance tools (checksum and image normalization, icon downloads), the
reconciliation tooling against the hub GraphQL API and the vault icon
generator.
"""
