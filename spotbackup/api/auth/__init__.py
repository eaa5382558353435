"""Login, OAuth callback and public configuration routes."""
