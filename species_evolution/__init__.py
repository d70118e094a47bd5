"""Species evolution: a generational simulation of integer-genome individuals."""

__version__ = '0.1.0'
