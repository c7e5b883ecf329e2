"""
Application services.

- pager: cursor pagination and accumulated list views
- image_upload: blob-then-document cover image writes
- lawyer_service: lawyer application review
- transaction_service: read-only payment history
- blog_service: blog post authoring
"""
