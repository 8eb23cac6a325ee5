from .schema import schema, create_graphql_router

__all__ = ["schema", "create_graphql_router"]
