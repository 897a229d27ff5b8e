"""Core domain package for forumrelay.

Core contains rule parsing, reconciliation, ordering and status logic without
any chat-platform or storage-specific code, keeping the business logic portable.
"""
