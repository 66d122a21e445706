"""
Business logic handlers for gang and campaign writes.

Handlers are transactional. Each one reports what it changed to the cost
invalidation dispatcher, which purges the affected cache tags after commit.
They are called from views, tasks or management commands and are directly
testable without HTTP machinery.
"""
