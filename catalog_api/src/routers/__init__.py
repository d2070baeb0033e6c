"""HTTP routers for books and authentication."""
