"""HTTP surface for HR providers."""
