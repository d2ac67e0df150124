# flask_restful API subclass
from http import HTTPStatus
import logging
import werkzeug
from flask import request
from flask.app import Flask
from flask_restful import Api as FRApiBase, abort
from flask_restful.representations.json import output_json
from flask_restful.utils import OrderedDict
from functools import wraps
from typing import Callable, Optional
import cattery
from .config import get_config
from .errors import GenericError, JsonapiError
from .json_encoder import CatteryJSONProvider
from .jsonapi import CatteryRelatedAPI, CatteryRestAPI
from .schema import ResourceType, Schema
from .storage import SQLAlchemyStorage

HTTP_METHODS = ["GET", "POST", "PATCH", "DELETE"]
DEFAULT_REPRESENTATIONS = [("application/vnd.api+json", output_json)]


class CatteryAPI(FRApiBase):
    """
    Subclass of the flask_restful API class where we add the expose_object method
    this method creates the API endpoints for a resource type

    http://jsonapi.org/format/#content-negotiation-servers
    Servers MUST send all JSON:API data in response documents with
    the header Content-Type: application/vnd.api+json without any media type parameters.
    """

    def __init__(self, app: Flask, schema: Schema, storage=None, prefix: str = "", **kwargs) -> None:
        """
        :param app: Flask app
        :param schema: resource type descriptors, all of them will be exposed with `expose_all`
        :param storage: storage used by the loader and the write methods, SQLAlchemyStorage by default
        :param prefix: url prefix, e.g. "/api"
        :param kwargs: cattery.Cattery configuration overrides
        """
        app_db = kwargs.pop("app_db", None)
        cattery.Cattery(app, app_db=app_db, prefix=prefix, **kwargs)
        self.schema = schema
        self.storage = storage if storage is not None else SQLAlchemyStorage()
        super().__init__(app, prefix=prefix, default_mediatype="application/vnd.api+json")
        app.json = CatteryJSONProvider(app)
        self.representations = OrderedDict(DEFAULT_REPRESENTATIONS)

    def expose_object(self, resource_type: ResourceType, url_prefix: str = "", **properties) -> None:
        """This methods creates the API url endpoints for a resource type
        :param resource_type: resource type descriptor
        :param url_prefix: url prefix (appended to the api prefix)
        :param properties: additional flask-restful properties

        creates a class of the form

        @api_decorator
        class cats_API(CatteryRestAPI):
            resource_type = CATS

        and adds it as an api resource to /cats and /cats/{CatId}
        """
        properties["resource_type"] = resource_type
        properties["schema"] = self.schema
        properties["storage"] = self.storage
        collection_endpoint = get_config("ENDPOINT_FMT").format(url_prefix, resource_type.type)
        instance_endpoint = get_config("INSTANCE_ENDPOINT_FMT").format(url_prefix, resource_type.type)
        properties["instance_endpoint"] = instance_endpoint

        # Expose the collection
        api_class_name = f"{resource_type.type}_API"  # name for dynamically generated classes
        url = get_config("RESOURCE_URL_FMT").format(url_prefix, resource_type.type)
        api_class = api_decorator(type(api_class_name, (CatteryRestAPI,), properties))
        cattery.log.info(f"Exposing {resource_type.type} on {url}, endpoint: {collection_endpoint}")
        self.add_resource(api_class, url, endpoint=collection_endpoint, methods=["GET", "POST"])

        # Expose the instances
        url = get_config("INSTANCE_URL_FMT").format(url_prefix, resource_type.type, resource_type.object_id)
        api_class = api_decorator(type(api_class_name + "_i", (CatteryRestAPI,), properties))
        cattery.log.info(f"Exposing {resource_type.type} instances on {url}, endpoint: {instance_endpoint}")
        self.add_resource(api_class, url, endpoint=instance_endpoint, methods=["GET", "PATCH", "DELETE"])

        for relationship in resource_type.relationships.values():
            self.expose_relationship(resource_type, relationship, url_prefix, properties)

    def expose_relationship(self, resource_type: ResourceType, relationship, url_prefix: str, properties: dict) -> None:
        """
        Expose the related records of a relationship, e.g. /cats/{CatId}/hobbies
        """
        properties = dict(properties, relationship=relationship)
        api_class_name = f"{resource_type.type}_{relationship.name}_API"
        url = get_config("RELATED_URL_FMT").format(url_prefix, resource_type.type, resource_type.object_id, relationship.name)
        endpoint = get_config("ENDPOINT_FMT").format(url_prefix, f"{resource_type.type}.{relationship.name}")
        api_class = api_decorator(type(api_class_name, (CatteryRelatedAPI,), properties))
        cattery.log.info(f"Exposing relationship {relationship.name} on {url}, endpoint: {endpoint}")
        self.add_resource(api_class, url, endpoint=endpoint, methods=["GET"])

    def expose_all(self, url_prefix: str = "") -> None:
        """
        Expose every resource type of the schema
        """
        for resource_type in self.schema:
            self.expose_object(resource_type, url_prefix)


def api_decorator(cls: type) -> type:
    """Decorator for the API views:
        - add exception handling
    :param cls: resource class to decorate
    :return: decorated class
    """
    for method_name in ["get", "post", "patch", "delete"]:
        method = getattr(cls, method_name, None)
        if not method:
            continue
        setattr(cls, method_name, http_method_decorator(method))
    return cls


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the supported jsonapi HTTP methods (get, post, patch, delete)
    - commit the database
    - convert all exceptions to a jsonapi errors response

    This method will be called for all requests
    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        """Wrap the method and perform error handling
        :param *args:
        :param **kwargs:
        :return: result of the wrapped method
        """
        cattery_exception: Optional[Exception] = None
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        message = ""
        try:
            if not request.is_jsonapi and fun.__name__ in ["post", "patch"]:
                # require a jsonapi content type for requests with a body
                raise GenericError(HTTPStatus.UNSUPPORTED_MEDIA_TYPE.description, HTTPStatus.UNSUPPORTED_MEDIA_TYPE.value)
            result = fun(*args, **kwargs)
            cattery.DB.session.commit()
            return result

        except JsonapiError as exc:
            cattery.log.debug(f"{type(exc).__name__} in {request.method} {request.path}", exc_info=exc)
            cattery_exception = exc

        except werkzeug.exceptions.HTTPException as exc:
            # raised by a nested http method (e.g. post -> get) that already aborted
            cattery.DB.session.rollback()
            raise

        except Exception as exc:
            cattery.log.exception(exc)
            cattery_exception = exc
            if cattery.log.getEffectiveLevel() > logging.DEBUG:
                message = "Logging Disabled"
            else:
                message = str(exc)

        # other exceptions (e.g. sqla StatementError) may carry unrelated "message" or "detail" attributes
        if isinstance(cattery_exception, JsonapiError):
            status_code = int(cattery_exception.status_code)
            message = cattery_exception.message or message

        cattery.DB.session.rollback()
        errors = dict(title=message, detail=message, code=str(status_code))
        abort(status_code, errors=[errors])

    return method_wrapper
