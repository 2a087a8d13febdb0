"""
gomsort - sorts Go methods within a file for readability.
"""

__version__ = "0.1.0"
