"""
sftime Core

Configuration, data types, exceptions and logging shared by all sub-packages.
"""
