"""Resolver package for the GraphQL schema.

Resolvers translate field invocations into loader and service calls. They
return domain records; the GraphQL types read fields off those records.
"""
