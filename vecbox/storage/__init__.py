from vecbox.storage.vector_store import PGVectorStore, build_store

__all__ = ["PGVectorStore", "build_store"]
