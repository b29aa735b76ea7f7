"""DroughtWatch: US Drought Monitor severity resolution and wildfire risk."""

__version__ = "1.0.0"
