"""
VR Asset Catalog

Metadata service for VR assets (geometry, materials, textures) and the
accounts that own them.
"""

__version__ = "1.0.0"
