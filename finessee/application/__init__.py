"""Application services: wishlists, users, feedback and product import."""
