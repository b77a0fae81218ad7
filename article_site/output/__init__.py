"""
Output generation: HTML pages and the JSON article index.
"""
