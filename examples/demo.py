#!/usr/bin/env python3
"""
  This demo application serves the cats api with a larger sqlite database
  When cattery is installed, you can run this app:
  $ python3 demo.py [Listener-IP] [cat count]

  This will run the example on http://Listener-Ip:5000

  - An sqlite database is created and populated with the sample cats
  - Another <cat count> cats are added, each with two of the hobbies
  - A jsonapi rest API is created for the cats and the hobbies

  The number of queries for GET /cats/?include=hobbies doesn't depend on the number of cats,
  run with DEBUG=10 to log them.
"""
import sys
from cattery import DB, SQLAlchemyStorage
from cattery.app import create_app
from cattery.models import CATS, HOBBIES

HOBBY_NAMES = ["sleeping", "hunting", "scratching", "purring"]


def populate(app, count):
    with app.app_context():
        storage = SQLAlchemyStorage()
        hobbies = CATS.get_relationship("hobbies")
        hobby_ids = [storage.insert(HOBBIES, {"name": name}) for name in HOBBY_NAMES]
        for i in range(count):
            cat_id = storage.insert(CATS, {"name": f"cat{i}", "breed": "Tabby", "weight": "fat"})
            storage.replace_links(hobbies, cat_id, [hobby_ids[i % 4], hobby_ids[(i + 1) % 4]])
        DB.session.commit()


# Address where the api will be hosted, change this if you're not running the app on localhost!
host = sys.argv[1] if sys.argv[1:] else "127.0.0.1"
cat_count = int(sys.argv[2]) if sys.argv[2:] else 200
app = create_app({"SQLALCHEMY_ECHO": False})
populate(app, cat_count)

if __name__ == "__main__":
    print(f"Created API: http://{host}:5000/cats/?include=hobbies")
    app.run(host=host)
