"""HTTP API for the VR Asset Catalog."""
