from prism.queries.builder import QueryBuilder

__all__ = ["QueryBuilder"]
