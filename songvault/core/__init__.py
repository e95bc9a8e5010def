"""Core services: chunk store, metadata index, upload, streaming, auth."""
from songvault.core.chunk_store import ChunkStore
from songvault.core.metadata_index import MetadataIndex
from songvault.core.streaming import StreamingRetrieval
from songvault.core.upload_pipeline import UploadPipeline

__all__ = ["ChunkStore", "MetadataIndex", "StreamingRetrieval", "UploadPipeline"]
