"""
Backend package for the player accounts and video feed API.

This package provides a FastAPI application with key-value store and
object storage abstractions so the service can run against DynamoDB and
S3 in production, or fully in memory for local development and tests.
"""
