"""Local (file based) infrastructure."""
