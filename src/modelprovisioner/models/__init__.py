"""Model inventory, gateway clients and the reconciliation runtime."""
