#src/domain/services/i_presentation_gateway.py

"""
Presentation gateway interface.

The pipeline drives the selection surface and the result overlay only through
this interface, and publishes its events through broadcast().
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from src.domain.models.pipeline_events import PipelineEvent
from src.domain.models.region_model import Region
from src.domain.models.translation_result import TranslationResult

RegionSelectedHandler = Callable[[Region, Optional[str]], None]
EventListener = Callable[[PipelineEvent], None]


class IPresentationGateway(ABC):

    @abstractmethod
    def bind_selection_handlers(self, on_selected: RegionSelectedHandler,
                                on_cancelled: Callable[[], None]) -> None:
        """
        Route user actions on the selection surface back to the pipeline.

        Args:
            on_selected: Called with the drawn region and the display id it was drawn on
            on_cancelled: Called when the user dismisses the selection surface
        """
        pass

    @abstractmethod
    def show_selector(self) -> None:
        """Show the full-screen selection surface. May raise on UI failure."""
        pass

    @abstractmethod
    def hide_selector(self) -> None:
        """Hide the selector; returns once it is off screen so a following capture does not include it."""
        pass

    @abstractmethod
    def show_overlay(self, result: TranslationResult) -> None:
        pass

    @abstractmethod
    def hide_overlay(self) -> bool:
        """
        Hide the result overlay.

        Returns:
            True if an overlay existed and was hidden
        """
        pass

    @abstractmethod
    def move_overlay(self, x: int, y: int) -> None:
        pass

    @abstractmethod
    def broadcast(self, event: PipelineEvent) -> None:
        """Deliver an event to every listener. Safe to call from any thread."""
        pass

    @abstractmethod
    def add_listener(self, listener: EventListener) -> Callable[[], None]:
        """
        Subscribe to broadcast events.

        Returns:
            A function that removes the listener
        """
        pass
