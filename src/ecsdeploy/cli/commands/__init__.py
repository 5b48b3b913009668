"""ecsdeploy CLI commands."""
