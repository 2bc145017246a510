"""Job board API and client-side user-state synchronization."""
