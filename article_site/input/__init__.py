"""
Input handling: front-matter parsing and loading documents from disk.
"""
