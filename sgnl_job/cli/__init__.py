"""Command line interface for the SGNL hello world HTTP job."""
