"""Domain layer: catalog model, ports and the reconciliation core."""
