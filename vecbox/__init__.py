"""
vecbox: documents in, nearest neighbours out.

Stores documents as embedding vectors in PostgreSQL (pgvector) across two
tables, vectors and metadata, and reassembles them on similarity search.
"""

__version__ = "0.3.0"
