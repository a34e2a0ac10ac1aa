"""
Cellular terrain generation: Worley regions, heights and meshes.
"""

__version__ = "0.1.0"
