"""Shared library code for ecsdeploy."""
