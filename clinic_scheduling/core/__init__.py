"""
Core layer: shared domain building blocks, wiring and application assembly.
"""
