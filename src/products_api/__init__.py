"""Products API.

A small FastAPI service exposing CRUD operations over a single Product
resource stored in a relational database through SQLModel.
"""

__version__ = "0.1.0"
