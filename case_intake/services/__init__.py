"""Import pipeline services: validation, team extraction, name matching, import."""
