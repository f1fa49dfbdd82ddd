"""HTTP routers for the card game server."""
