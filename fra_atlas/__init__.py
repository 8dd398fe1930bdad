"""
FRA Atlas - Forest-rights claims mapped over Indian administrative boundaries.

This package provides an interactive map session that renders forest-rights
claim polygons, lets the user drill from country to state to district over
remotely fetched boundary layers, and searches and filters the claims.
"""

__version__ = "1.0.0"
__author__ = "Data Analytics Team"
