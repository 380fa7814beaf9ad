"""Finessee catalog API.

Product catalog with faceted search, wishlists and admin tooling.
"""
