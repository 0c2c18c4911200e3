"""Core building blocks: build status, request routing, server bootstrap."""
