"""Lumina Library - Services Package

Outbound integrations:
- Gemini insight service
- Shared HTTP client
"""
