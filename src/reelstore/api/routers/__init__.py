"""API routers for reelstore."""
