# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# If set to debug, too much sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#      "title": "Unknown Relationship: owners",
#      "detail": "Unknown Relationship: owners",
#      "code": 400
# }
#
import traceback
from flask import has_request_context, request
from werkzeug.exceptions import NotFound
import cattery
from sqlalchemy.exc import DontWrapMixin
from http import HTTPStatus
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class JsonapiError(Exception, DontWrapMixin):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""


class NotFoundError(JsonapiError, NotFound):
    """
    This exception is raised when an item was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value
    message = "NotFoundError "

    def __init__(self, message="", status_code=HTTPStatus.NOT_FOUND.value, api_code=None):
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        :param api_code: API code
        """
        JsonapiError.__init__(self, message)
        self.status_code = status_code
        cattery.log.error("Not found: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class UnknownResourceType(NotFoundError):
    """
    Raised when a resource type is not declared in the schema
    """

    message = "Unknown Resource Type: "

    def __init__(self, type_name, status_code=HTTPStatus.NOT_FOUND.value):
        NotFoundError.__init__(self, str(type_name), status_code)
        self.type_name = type_name


class UnknownRelationship(JsonapiError):
    """
    Raised when an include= relationship name is not declared on the resource type
    The relationship name is always sent back to the client:
    "If a server is unable to identify a relationship path [...] it MUST respond with 400 Bad Request."
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Unknown Relationship: "

    def __init__(self, rel_name, type_name=None, status_code=HTTPStatus.BAD_REQUEST.value):
        Exception.__init__(self, rel_name)
        self.status_code = status_code
        self.rel_name = rel_name
        self.type_name = type_name
        cattery.log.warning("Unknown relationship %s.%s", type_name, rel_name)
        self.message += str(rel_name)


class StorageUnavailable(JsonapiError):
    """
    Raised by the storage when the database can't be reached
    """

    status_code = HTTPStatus.SERVICE_UNAVAILABLE.value
    message = "Storage Unavailable: "

    def __init__(self, message="", status_code=HTTPStatus.SERVICE_UNAVAILABLE.value, api_code=None):
        Exception.__init__(self, message)
        self.status_code = status_code
        cattery.log.error("Storage unavailable: %s", message)
        if is_debug():
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


class GenericError(JsonapiError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500
    message = "Generic Error: "

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value, api_code=None):
        Exception.__init__(self, message)
        self.status_code = status_code
        cattery.log.error("Generic Error: %s", message)
        if is_debug():
            if has_request_context():
                cattery.log.info(f"Error in {request.url}")
            cattery.log.debug(traceback.format_exc(120))
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


class ValidationError(JsonapiError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Validation Error: "

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value, api_code=None):
        Exception.__init__(self, message)
        self.status_code = status_code
        cattery.log.warning("ValidationError: %s", message)
        self.message += message
