"""
Utility helpers for disparity maps and file I/O
"""
