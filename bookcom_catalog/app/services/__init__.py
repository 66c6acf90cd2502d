"""
Service layer abstraction.

Each service encapsulates business logic for a domain and reaches the
database only through the cache-aside accessors and stores it is given.
"""
