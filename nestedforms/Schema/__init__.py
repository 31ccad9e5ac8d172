from .SchemaBuilder import FormSchemaBuilder, CompositeFormSchemaBuilder
