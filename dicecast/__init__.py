"""
Dicecast - physically simulated polyhedral dice.

Three subsystems:
- geometry: procedural chamfered dice meshes, label tables and collision hulls
- notation: lenient parser for roll notation (2d20+3d6kh2-4)
- engine: spawns dice into an external physics world, detects settling,
  reads resting faces and aggregates the final result
"""

__version__ = "0.1.0"
