"""Configuration resolution and validation for the gobot-lux sensor agent."""
