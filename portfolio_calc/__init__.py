"""Target-weight deposit allocation and rebalancing calculator."""
