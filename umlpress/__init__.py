"""
umlpress - multi-page PlantUML rendering through an external engine

Drives the PlantUML jar to export every page of a diagram, one engine process
per page, collecting page artifacts in page order.

Architecture:
- Diagram Context: Source units, page and title discovery
- Rendering Context: Engine launch, ordered page draining, format conversion
"""

__version__ = "0.1.0"
