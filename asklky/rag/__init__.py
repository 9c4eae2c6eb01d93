"""Retrieval-augmentation pipeline components.

This package contains modules for:
- Keyword passage selection over the corpus
- Persona prompt assembly from the selected passages
"""
