"""Command line tools for inspecting Consul registration and discovery."""
