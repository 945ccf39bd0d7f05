"""File generation pipeline for WordPress blocks, symbols and SCSS partials."""

from .config import GenerationSettings, load_config
from .coordinator import EventKind, GenerationCoordinator, RecordEvent
from .models import ComponentRecord, ContentType, GenerationReport

__version__ = "0.1.0"

__all__ = [
    "ComponentRecord",
    "ContentType",
    "EventKind",
    "GenerationCoordinator",
    "GenerationReport",
    "GenerationSettings",
    "RecordEvent",
    "load_config",
]
