"""
http://jsonapi.org/format/#content-negotiation-servers

Server Responsibilities
Servers MUST send all JSON API data in response documents with the header
"Content-Type: application/vnd.api+json" without any media type parameters.
"""
from flask import Request
import cattery
from .config import get_config
from .errors import ValidationError


# pylint: disable=too-many-ancestors
class CatteryRequest(Request):
    """
    Parse the jsonapi-related request arguments:
    - header: Content-Type should be "application/vnd.api+json"
    - query args: include
    - body: valid json
    """

    jsonapi_content_types = ["application/json", "application/vnd.api+json"]
    is_jsonapi = False  # indicates whether this is a jsonapi request

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parse_content_type()

    def parse_content_type(self):
        """
        Check if the request content type is jsonapi
        """
        if not isinstance(self.content_type, str):  # pragma: no cover
            return

        content_type = self.content_type.split(";")[0].strip()
        if content_type in self.jsonapi_content_types:
            self.is_jsonapi = True

    @property
    def includes(self):
        """
        :return: list of relationship names from the include= query argument (csv)

        http://jsonapi.org/format/#fetching-includes
        Multiple related resources can be requested in a comma-separated list
        """
        included_csv = self.args.get("include", get_config("DEFAULT_INCLUDED") or "")
        result = [inc.strip() for inc in included_csv.split(",") if inc.strip()]
        for inc in result:
            if "." in inc:
                # only relationships of the primary data can be included
                raise ValidationError(f"Unsupported relationship path '{inc}'")
        return result

    def get_jsonapi_payload(self):
        """
        :return: jsonapi request payload
        """
        if not self.is_jsonapi:  # pragma: no cover
            cattery.log.warning(f'Invalid Media Type! "{self.content_type}"')
        result = self.get_json(silent=True)
        if not isinstance(result, dict):
            raise ValidationError(f"Invalid JSON Payload : {result}")
        return result
