"""
Contains some useful utility functions to be used in rule functions.
"""
from .access import optional_field, read_field, required_field, write_field
