"""
Segment DB - file-backed tabular store

A small single-node store that keeps each table as a sequence of
row-limited CSV segment files, with a command interpreter for INSERT,
SELECT and DELETE over conjunctive equality predicates.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
