"""Metadata and file delivery backend for the CloudPDF viewer."""
