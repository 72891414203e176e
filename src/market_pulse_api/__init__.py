"""HTTP surface for the market pulse store."""
