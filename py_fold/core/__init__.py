"""
Core artwork generation functionality.

Public names are re-exported from the top-level ``py_fold`` package.
"""
