"""
CENOV database administration backend.

Table explorer, bulk export, CSV catalog import and WordPress export
over the cenov, cenov_dev and cenov_preprod PostgreSQL databases.
"""

__version__ = "0.1.0"
