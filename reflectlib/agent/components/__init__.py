"""Agent components package.

Each component has its own module with models and implementations.
"""
