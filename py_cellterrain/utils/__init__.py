"""
Utility helpers.
"""

from .interpolation import clamp, lerp, unlerp, smoothstep, interp_quintic

__all__ = ['clamp', 'lerp', 'unlerp', 'smoothstep', 'interp_quintic']
