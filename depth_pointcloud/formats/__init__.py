"""
File Format Module

Reads OpenEXR depth buffers and writes PCD point clouds.
"""

from .exr_reader import ExrDepthReader
from .pcd_writer import PCDWriter

__all__ = ['ExrDepthReader', 'PCDWriter']
