"""Study notification config files."""
