"""
sqla models and the resource type descriptors of the exposed cats and hobbies

cats <-> hobbies is a many-to-many relationship, stored in the cat_hobbies join table.
CatHobby is only used by the storage to resolve the "hobbies" and "cats" relationships.
"""
from .cattery_init import DB as db
from .schema import Relationship, ResourceType, Schema


class Cat(db.Model):
    """
    description: A cat
    """

    __tablename__ = "cats"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String)
    breed = db.Column(db.String)
    weight = db.Column(db.String)
    temperament = db.Column(db.String)


class Hobby(db.Model):
    """
    description: Something a cat likes to do
    """

    __tablename__ = "hobbies"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String)


class CatHobby(db.Model):
    __tablename__ = "cat_hobbies"
    id = db.Column(db.Integer, primary_key=True)
    cat_id = db.Column(db.Integer, db.ForeignKey("cats.id"), nullable=False, index=True)
    hobby_id = db.Column(db.Integer, db.ForeignKey("hobbies.id"), nullable=False, index=True)


CATS = ResourceType(
    "cats",
    Cat,
    attributes=("name", "breed", "weight", "temperament"),
    relationships=[Relationship("hobbies", "hobbies", CatHobby, owner_key="cat_id", target_key="hobby_id")],
)

HOBBIES = ResourceType(
    "hobbies",
    Hobby,
    attributes=("name",),
    relationships=[Relationship("cats", "cats", CatHobby, owner_key="hobby_id", target_key="cat_id")],
)

schema = Schema(CATS, HOBBIES)
