"""
Isolation Lab - Transaction Isolation & Row Locking Simulator

A teaching engine that simulates how a relational storage engine enforces
isolation levels, row locks, lock waits and deadlock detection across two
concurrent client sessions on a tiny products table.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
