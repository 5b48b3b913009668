"""Configuration loading for ecsdeploy."""
