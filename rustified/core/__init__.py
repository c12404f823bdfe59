"""
Rustified Core Module
======================

Contains the scan engine (verdict aggregation plus directory traversal)
and the data models.
"""
