"""Command line tool for managing gitpaq packages."""
