"""Public API for sbgnpathway."""
from .config import ConfigError, PathwayConfig, build_config
from .document import DocumentComposer, SBGNPathway, compose, render
from .layout import CoordinateTable, resolve_positions
from .models import Compartment, Connection, Entity, Enzyme, Marker, PathwayDataError, parse_pathway
from .resources import ExampleNotFoundError, list_examples, load_example
from .themes import ThemeRegistry
from .validation import ValidationResult, find_circular_connections, validate_pathway_data

__all__ = [
    "render",
    "compose",
    "SBGNPathway",
    "DocumentComposer",
    "PathwayConfig",
    "build_config",
    "ConfigError",
    "PathwayDataError",
    "parse_pathway",
    "resolve_positions",
    "CoordinateTable",
    "Entity",
    "Connection",
    "Enzyme",
    "Marker",
    "Compartment",
    "ThemeRegistry",
    "validate_pathway_data",
    "ValidationResult",
    "find_circular_connections",
    "load_example",
    "list_examples",
    "ExampleNotFoundError",
]
