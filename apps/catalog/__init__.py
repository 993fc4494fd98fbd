"""Service catalog: services, tiers, configurable options and pricing rules."""
