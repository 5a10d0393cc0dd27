"""Vault icon generation from constituent token images."""

from chainmeta.imaging.brand import LinearGradient, SolidColor, resolve_brand_color
from chainmeta.imaging.compose import merge_token_images
from chainmeta.imaging.generator import VaultImageGenerator, VaultImageResult

__all__ = [
    "LinearGradient",
    "SolidColor",
    "VaultImageGenerator",
    "VaultImageResult",
    "merge_token_images",
    "resolve_brand_color",
]
