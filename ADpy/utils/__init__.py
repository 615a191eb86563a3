"""
Utils module for ADpy.
"""

from .gradcheck import gradcheck, numerical_gradient

__all__ = ["gradcheck", "numerical_gradient"]
