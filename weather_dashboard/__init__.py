"""Campus weather dashboard: Open-Meteo polling, normalization and a JSON view."""
