"""
Task board backend.

This package provides a FastAPI application that keeps kanban task cards in
a MongoDB collection and serves create/list/update/delete over HTTP.
"""
