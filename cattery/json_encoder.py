# cattery to json encoding

import datetime
import decimal
import json
from flask.json.provider import DefaultJSONProvider
from uuid import UUID
import cattery
from .config import is_debug


class _CatteryJSONEncoder:
    """
    JSON encoding for the types that may end up in attributes
    """

    # pylint: disable=too-many-return-statements
    def default(self, obj, **kwargs):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if obj is None:
            return None
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat(" ")
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):  # pragma: no cover
            return str(obj)
        if isinstance(obj, decimal.Decimal):  # pragma: no cover
            return float(obj)
        if isinstance(obj, bytes):  # pragma: no cover
            if obj == b"":
                return ""
            cattery.log.debug("CatteryJSONEncoder: serializing bytes obj")
            return obj.hex()

        if not is_debug():  # pragma: no cover
            cattery.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
            return {"error": "CatteryJSONEncoder invalid object"}

        return str(obj)


class CatteryJSONProvider(_CatteryJSONEncoder, DefaultJSONProvider):
    """
    Flask JSON encoding
    """

    mimetype = "application/vnd.api+json"


class CatteryJSONEncoder(_CatteryJSONEncoder, json.JSONEncoder):
    """
    Common JSON encoding
    """

    pass
