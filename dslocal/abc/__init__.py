"""
Interface definitions for dslocal.

(ABC = Abstract Base Classes)
"""


from . import configurations, shadowhash


__author__ = 'Aaron Hosford'
