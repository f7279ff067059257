"""
Headless physics and render collaborators for running rolls without a renderer.
"""

from .sandbox import GRAVITY, RecordingScene, SandboxBody, SandboxWorld

__all__ = ['GRAVITY', 'RecordingScene', 'SandboxBody', 'SandboxWorld']
