from marshmallow import INCLUDE, Schema, fields, validate

Person = Schema.from_dict({
    "name": fields.String(validate=validate.Length(min=1), required=True),
    "age": fields.Integer(strict=True, validate=validate.Range(min=0)),
    "tags": fields.List(fields.String()),
}, name="Person")
PersonSchema = Person(unknown=INCLUDE)

__all__ = ["Person", "PersonSchema"]
