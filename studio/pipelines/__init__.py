"""Pipelines that compose the entity stores, the media store and the notifier.

Each pipeline is constructed once at startup and shared across requests.
"""
