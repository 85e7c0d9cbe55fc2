"""
Configuration management for the CloudPDF API.

Contains the Pydantic settings shared by the local and presigned storage modes.
"""
