"""AI points activities and reward redemption."""
