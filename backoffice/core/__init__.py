"""Core configuration, security and identity helpers."""
