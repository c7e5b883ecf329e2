"""Pydantic schemas for stored records and API payloads.

- base.py: shared record base classes and page containers
- lawyer.py: lawyer onboarding applications
- transaction.py: payment transactions
- blog.py: blog posts and editor payloads
- auth.py: login and session responses

Import from this module: `from counsel_admin.models import BlogPost`
"""

from counsel_admin.models.base import Page, PageResponse, RecordModel, StoredRecord
from counsel_admin.models.auth import AdminInfo, LoginResponse, LogoutResponse, SessionInfo
from counsel_admin.models.lawyer import (
    AddressDetails,
    BarCouncilEnrollment,
    EducationalQualification,
    LawyerApplication,
    LawyerApprovalResponse,
)
from counsel_admin.models.transaction import Transaction, TransactionStatus
from counsel_admin.models.blog import (
    SUGGESTED_TAGS,
    Author,
    BlogImageUploadResponse,
    BlogPost,
    BlogPostCreate,
    BlogPostDeleteResponse,
    BlogPostSaveResponse,
    BlogPostUpdate,
    BlogTagOptions,
)

__all__ = [
    "Page",
    "PageResponse",
    "RecordModel",
    "StoredRecord",
    "AdminInfo",
    "LoginResponse",
    "LogoutResponse",
    "SessionInfo",
    "AddressDetails",
    "BarCouncilEnrollment",
    "EducationalQualification",
    "LawyerApplication",
    "LawyerApprovalResponse",
    "Transaction",
    "TransactionStatus",
    "SUGGESTED_TAGS",
    "Author",
    "BlogImageUploadResponse",
    "BlogPost",
    "BlogPostCreate",
    "BlogPostDeleteResponse",
    "BlogPostSaveResponse",
    "BlogPostUpdate",
    "BlogTagOptions",
]
