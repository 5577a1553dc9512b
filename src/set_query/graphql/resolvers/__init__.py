"""
GraphQL resolvers
"""
