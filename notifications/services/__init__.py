"""Services for the notifications app.

Singletons are not re-exported here to keep Django app loading free of
import cycles. Import them from their modules.
"""
