"""Back up and restore a Spotify library (playlists and saved tracks)."""

__version__ = "1.0.0"
