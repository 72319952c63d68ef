"""Client for the external group directory."""
