"""
Application layer: session coordination and frame validation.
"""
