# flake8: noqa: F401
#
# cattery: a JSON:API service for cats and their hobbies
#
from .cattery_init import DB, log, Cattery
from .errors import (
    JsonapiError,
    ValidationError,
    GenericError,
    NotFoundError,
    UnknownResourceType,
    UnknownRelationship,
    StorageUnavailable,
)
from .record import Record, ResourceIdentifier
from .schema import Relationship, ResourceType, Schema
from .loader import Loader
from .serializer import Serializer
from .storage import SQLAlchemyStorage
from .api import CatteryAPI

__version__ = "1.0.0"
__description__ = "cattery : JSON:API for cats and hobbies with Flask and SQLAlchemy"

__all__ = (
    "__version__",
    "__description__",
    #
    "Cattery",
    "CatteryAPI",
    # core:
    "Record",
    "ResourceIdentifier",
    "Relationship",
    "ResourceType",
    "Schema",
    "Loader",
    "Serializer",
    "SQLAlchemyStorage",
    # Errors:
    "JsonapiError",
    "ValidationError",
    "GenericError",
    "NotFoundError",
    "UnknownResourceType",
    "UnknownRelationship",
    "StorageUnavailable",
)
