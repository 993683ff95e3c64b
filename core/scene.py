"""
core/scene.py — Scene interface

The sandbox app holds a stack of scenes; only the top one receives
events, updates and draw calls.

    class MyScene(Scene):
        def on_enter(self, app):
            # build world state, subscribe to events
            ...

        def update(self, dt, app):
            # dt is seconds since last frame
            ...
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pygame
    from core.app import App


class Scene:
    def on_enter(self, app: App):
        """Called when this scene becomes active."""

    def on_exit(self, app: App):
        """Called when this scene is removed or covered."""

    def handle_event(self, event: pygame.event.Event, app: App):
        """Process a single pygame event."""

    def update(self, dt: float, app: App):
        """Advance the scene. dt is seconds."""

    def draw(self, surface: pygame.Surface, app: App):
        """Draw to the screen surface."""
