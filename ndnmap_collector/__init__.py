"""
ndnmap Link Status Collector

This package receives link status reports that NDN testbed gateways encode
in interest names, and relays them as bandwidth samples to the ndnmap
visualization service.
"""

__version__ = "0.1.0"
