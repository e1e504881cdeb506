"""SchemaBase - runtime schema registry and generic data service.

Register record shapes at runtime and run reference-checked CRUD
over the collections they describe.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
