"""Note storage, chunking and the ingestion/retrieval/deletion coordinators."""
