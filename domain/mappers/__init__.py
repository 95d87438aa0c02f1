"""
Domain mappers package.
Transforms stored documents into API responses and request models into documents.
"""

from domain.mappers.document_mapper import DocumentMapper
from domain.mappers.user_mapper import UserMapper

__all__ = ["DocumentMapper", "UserMapper"]
