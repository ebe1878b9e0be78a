"""
Business services: region resolution and shipping line edits.
"""
