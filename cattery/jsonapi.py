#  This file contains the jsonapi-related flask-restful "Resource" objects:
#  - CatteryRestAPI for exposed collections and instances
#  - CatteryRelatedAPI for the related records of an instance, e.g. /cats/{CatId}/hobbies
#
#  The resources don't access the database directly:
#  the loader retrieves the records, the serializer renders the jsonapi documents
#  and writes go through the storage.
#
# pylint: disable=redefined-builtin,invalid-name,protected-access
#
from http import HTTPStatus
from flask import jsonify, make_response as flask_make_response, request, url_for
from flask_restful import Resource as FRResource
import cattery
from .errors import NotFoundError, ValidationError
from .loader import Loader
from .serializer import Serializer


def make_response(*args, **kwargs):
    """
    Customized flask-restful make_response
    """
    response = flask_make_response(*args, **kwargs)
    response.headers["Content-Type"] = "application/vnd.api+json"
    return response


class Resource(FRResource):
    """
    Superclass for the exposed endpoints
    * Collections and instances : CatteryRestAPI
    * Related records : CatteryRelatedAPI

    The class attributes are set when the resource is exposed by CatteryAPI
    """

    # resource type descriptor of the exposed collection
    resource_type = None
    schema = None
    storage = None
    instance_endpoint = None

    @property
    def loader(self):
        return Loader(self.schema, self.storage)

    @property
    def serializer(self):
        return Serializer(self.schema)


class CatteryRestAPI(Resource):
    """
    Flask webservice wrapper for a resource type: GET, POST, PATCH and DELETE

    http://jsonapi.org/format/#document-resource-objects
    """

    def get(self, **kwargs):
        """
        HTTP GET: return instances
        If no id is given: return all instances
        If an id is given, get an instance by id

        id is specified by resource_type.object_id, f.i. {CatId}
        The related records of the relationships in the include= query argument are added to "included"
        """
        type_name = self.resource_type.type
        include = request.includes
        object_id = kwargs.get(self.resource_type.object_id, None)

        if object_id is None:
            records = self.loader.load(type_name, include)
            document = self.serializer.serialize(type_name, records, include)
        else:
            records = self.loader.load(type_name, include, ids=[object_id])
            if not records:
                raise NotFoundError(f'Invalid "{self.resource_type.class_name}" ID "{object_id}"')
            document = self.serializer.serialize(type_name, records, include, many=False)

        return make_response(jsonify(document), HTTPStatus.OK)

    def post(self, **kwargs):
        """
        http://jsonapi.org/format/#crud-creating
        The request MUST include a single resource object as primary data.
        The resource object MUST contain at least a type member.
        If a relationship is provided in the relationships member of the resource object,
        its value MUST be a relationship object with a data member.

        Response:
        201: Created, with a Location header identifying the location of the newly created resource
        409: Conflict, the type of the resource object doesn't match the collection
        """
        object_id = kwargs.get(self.resource_type.object_id, None)
        if object_id is not None:
            raise ValidationError("POSTing to an instance is not allowed", status_code=HTTPStatus.METHOD_NOT_ALLOWED)

        data = self._parse_data(request.get_jsonapi_payload())
        if "id" in data:
            cattery.log.warning(f"Client-generated ids are not allowed for {self.resource_type.type}")

        attributes = self._parse_attributes(data)
        links = self._parse_relationships(data)
        new_id = self.storage.insert(self.resource_type, attributes)
        for relationship, target_ids in links:
            self.storage.replace_links(relationship, new_id, target_ids)

        obj_args = {self.resource_type.object_id: str(new_id)}
        response = make_response(self.get(**obj_args), HTTPStatus.CREATED)
        response.headers["Location"] = url_for(self.instance_endpoint, **obj_args)
        return response

    def patch(self, **kwargs):
        """
        https://jsonapi.org/format/#crud-updating
        Update the attributes of the instance with the specified id,
        the relationships in the payload completely replace the current relationship members
        """
        object_id = kwargs.get(self.resource_type.object_id, None)
        if object_id is None:
            raise ValidationError("Invalid ID", status_code=HTTPStatus.METHOD_NOT_ALLOWED)

        data = self._parse_data(request.get_jsonapi_payload())
        body_id = data.get("id", None)
        if body_id is None:
            raise ValidationError("No ID in body")
        if str(body_id) != str(object_id):
            raise ValidationError(f"Invalid ID {body_id} != {object_id}", status_code=HTTPStatus.CONFLICT)

        db_id = self.resource_type.parse_id(object_id)
        attributes = self._parse_attributes(data)
        links = self._parse_relationships(data)
        self.storage.update(self.resource_type, db_id, attributes)
        for relationship, target_ids in links:
            self.storage.replace_links(relationship, db_id, target_ids)

        return self.get(**kwargs)

    def delete(self, **kwargs):
        """
        http://jsonapi.org/format/#crud-deleting
        204 No Content: the deletion request is successful and no content is returned.
        404 Not Found: the resource doesn't exist
        """
        object_id = kwargs.get(self.resource_type.object_id, None)
        if object_id is None:
            raise ValidationError("", status_code=HTTPStatus.METHOD_NOT_ALLOWED)

        self.storage.delete(self.resource_type, self.resource_type.parse_id(object_id))
        return make_response("", HTTPStatus.NO_CONTENT)

    def _parse_data(self, payload):
        """
        :param payload: jsonapi request payload
        :return: the "data" resource object
        """
        data = payload.get("data")
        if not isinstance(data, dict):
            raise ValidationError("Invalid Data Object")
        obj_type = data.get("type", None)
        if obj_type != self.resource_type.type:
            raise ValidationError(f"Invalid type member: {obj_type} != {self.resource_type.type}", status_code=HTTPStatus.CONFLICT)
        return data

    def _parse_attributes(self, data):
        """
        :return: the declared attributes from the resource object, other attributes are ignored
        """
        attributes = data.get("attributes", {})
        if not isinstance(attributes, dict):
            raise ValidationError("Invalid attributes")
        result = {}
        for attr_name, attr_val in attributes.items():
            if attr_name not in self.resource_type.attributes:
                cattery.log.warning(f"Ignoring unknown {self.resource_type.type} attribute '{attr_name}'")
                continue
            if isinstance(attr_val, (dict, list)):
                # the attribute columns hold scalar values
                raise ValidationError(f"Invalid value for {self.resource_type.type} attribute '{attr_name}'")
            result[attr_name] = attr_val
        return result

    def _parse_relationships(self, data):
        """
        :return: list of (relationship, [target storage ids]) tuples for the relationships in the resource object
        """
        relationships = data.get("relationships", {})
        if not isinstance(relationships, dict):
            raise ValidationError("Invalid relationships")
        result = []
        for rel_name, rel_val in relationships.items():
            relationship = self.resource_type.get_relationship(rel_name)
            target_type = self.schema.get(relationship.target)
            if not isinstance(rel_val, dict) or not isinstance(rel_val.get("data"), list):
                raise ValidationError(f"Invalid relationship payload: {rel_val}")
            target_ids = []
            for item in rel_val["data"]:
                if not isinstance(item, dict) or "id" not in item:
                    raise ValidationError(f"Invalid relationship payload: {item}")
                if item.get("type") != target_type.type:
                    raise ValidationError(f"Invalid type {item.get('type')} != {target_type.type}", status_code=HTTPStatus.CONFLICT)
                target_ids.append(target_type.parse_id(item["id"]))
            missing = self.storage.missing_ids(target_type, target_ids)
            if missing:
                raise NotFoundError(f'Invalid "{target_type.class_name}" ID {sorted(missing)}')
            result.append((relationship, target_ids))
        return result


class CatteryRelatedAPI(Resource):
    """
    Related records of an instance, e.g. /cats/{CatId}/hobbies

    https://jsonapi.org/format/#fetching-resources
    the primary data is the (possibly empty) list of related records
    """

    relationship = None

    def get(self, **kwargs):
        object_id = kwargs.get(self.resource_type.object_id)
        include = request.includes
        target = self.relationship.target
        records = self.loader.load_related(self.resource_type.type, object_id, self.relationship.name, include)
        document = self.serializer.serialize(target, records, include)
        return make_response(jsonify(document), HTTPStatus.OK)
