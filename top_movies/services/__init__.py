"""Sync services.

Services hold the feed, merge and rating policies and are called by routes.
Collaborators (store, cache, feed client) are passed in explicitly.
"""
