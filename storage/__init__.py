"""
Storage package for persisting article embeddings.
"""

from .supabase_storage import SupabaseVectorStore

__all__ = ['SupabaseVectorStore']
