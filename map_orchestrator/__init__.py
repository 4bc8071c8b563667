"""
Map orchestration engine: tool calls from a voice assistant drive a shared
map state store, which a reactive binding keeps in step with a 3D map.
"""

__version__ = "1.0.0"
