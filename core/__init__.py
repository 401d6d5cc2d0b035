"""core/ -- Process-wide configuration. Imports nothing from api/ or auth/."""
